"""create call booking tables

Revision ID: a1b2c3d4e5f6
Revises: 
Create Date: 2026-02-02 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=80), nullable=False),
        sa.Column('entity', sa.String(length=80), nullable=True),
        sa.Column('entity_id', sa.String(length=80), nullable=True),
        sa.Column('ip', sa.String(length=64), nullable=True),
        sa.Column('user_agent', sa.String(length=255), nullable=True),
        sa.Column('metadata_json', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('audit_logs', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_audit_logs_timestamp'), ['timestamp'], unique=False)

    op.create_table(
        'call_bookings',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('start_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('topic', sa.String(length=160), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('payment_provider', sa.String(length=20), nullable=True),
        sa.Column('payment_status', sa.String(length=10), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=10), nullable=False),
        sa.Column('razorpay_order_id', sa.String(length=64), nullable=True),
        sa.Column('razorpay_payment_id', sa.String(length=64), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('razorpay_order_id', 'razorpay_payment_id', name='uq_call_booking_payment')
    )
    with op.batch_alter_table('call_bookings', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_call_bookings_start_at'), ['start_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_bookings_email'), ['email'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_bookings_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_bookings_payment_status'), ['payment_status'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_bookings_razorpay_order_id'), ['razorpay_order_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_bookings_razorpay_payment_id'), ['razorpay_payment_id'], unique=False)

    op.create_table(
        'call_checkouts',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('start_at', sa.DateTime(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('topic', sa.String(length=160), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('currency', sa.String(length=10), nullable=False),
        sa.Column('razorpay_order_id', sa.String(length=64), nullable=False),
        sa.Column('razorpay_payment_id', sa.String(length=64), nullable=True),
        sa.Column('booking_id', sa.String(length=32), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('hold_expires_at', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['booking_id'], ['call_bookings.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('call_checkouts', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_call_checkouts_start_at'), ['start_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_checkouts_razorpay_order_id'), ['razorpay_order_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_checkouts_booking_id'), ['booking_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_checkouts_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_checkouts_hold_expires_at'), ['hold_expires_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_checkouts_expires_at'), ['expires_at'], unique=False)

    op.create_table(
        'call_slot_locks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('block_start_at', sa.DateTime(), nullable=False),
        sa.Column('kind', sa.String(length=10), nullable=False),
        sa.Column('booking_id', sa.String(length=32), nullable=True),
        sa.Column('hold_id', sa.String(length=32), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "(kind = 'hold' AND hold_id IS NOT NULL AND booking_id IS NULL)"
            " OR (kind = 'booking' AND booking_id IS NOT NULL AND hold_id IS NULL)",
            name='ck_call_slot_lock_owner'
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('block_start_at', name='uq_call_slot_lock_block')
    )
    with op.batch_alter_table('call_slot_locks', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_call_slot_locks_kind'), ['kind'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_slot_locks_booking_id'), ['booking_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_slot_locks_hold_id'), ['hold_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_call_slot_locks_expires_at'), ['expires_at'], unique=False)

    op.create_table(
        'refund_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('booking_id', sa.String(length=32), nullable=True),
        sa.Column('razorpay_order_id', sa.String(length=64), nullable=True),
        sa.Column('razorpay_payment_id', sa.String(length=64), nullable=True),
        sa.Column('amount_minor', sa.Integer(), nullable=True),
        sa.Column('currency', sa.String(length=10), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('admin_note', sa.String(length=500), nullable=True),
        sa.Column('refund_id', sa.String(length=64), nullable=True),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['booking_id'], ['call_bookings.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('razorpay_payment_id')
    )
    with op.batch_alter_table('refund_requests', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_refund_requests_email'), ['email'], unique=False)
        batch_op.create_index(batch_op.f('ix_refund_requests_booking_id'), ['booking_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_refund_requests_razorpay_order_id'), ['razorpay_order_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_refund_requests_status'), ['status'], unique=False)
        batch_op.create_index(batch_op.f('ix_refund_requests_refund_id'), ['refund_id'], unique=False)


def downgrade():
    op.drop_table('refund_requests')
    op.drop_table('call_slot_locks')
    op.drop_table('call_checkouts')
    op.drop_table('call_bookings')
    op.drop_table('audit_logs')
