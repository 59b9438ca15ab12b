from models.db import db, utcnow

LOCK_KIND_HOLD = "hold"
LOCK_KIND_BOOKING = "booking"


class SlotLock(db.Model):
    __tablename__ = "call_slot_locks"

    id = db.Column(db.Integer, primary_key=True)

    # one row per step-sized block; the unique constraint is what prevents double booking
    block_start_at = db.Column(db.DateTime, nullable=False)
    kind = db.Column(db.String(10), nullable=False, index=True)  # hold, booking

    booking_id = db.Column(db.String(32), nullable=True, index=True)
    hold_id = db.Column(db.String(32), nullable=True, index=True)

    # holds only; an expired hold counts as free even before the sweep deletes it
    expires_at = db.Column(db.DateTime, nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint("block_start_at", name="uq_call_slot_lock_block"),
        db.CheckConstraint(
            "(kind = 'hold' AND hold_id IS NOT NULL AND booking_id IS NULL)"
            " OR (kind = 'booking' AND booking_id IS NOT NULL AND hold_id IS NULL)",
            name="ck_call_slot_lock_owner",
        ),
    )
