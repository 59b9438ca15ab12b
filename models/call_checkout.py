from models.db import db, utcnow
from models.call_booking import _iso

CHECKOUT_STATUSES = ("created", "paid", "expired", "cancelled")


class CallCheckout(db.Model):
    __tablename__ = "call_checkouts"

    # doubles as the hold id of the slot locks it owns
    id = db.Column(db.String(32), primary_key=True)

    start_at = db.Column(db.DateTime, nullable=False, index=True)
    duration_minutes = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    topic = db.Column(db.String(160), nullable=False)
    title = db.Column(db.String(200), nullable=False)

    amount = db.Column(db.Integer, nullable=False)
    currency = db.Column(db.String(10), nullable=False)

    razorpay_order_id = db.Column(db.String(64), nullable=False, index=True)
    razorpay_payment_id = db.Column(db.String(64), nullable=True)
    booking_id = db.Column(db.String(32), db.ForeignKey("call_bookings.id"), nullable=True, index=True)

    status = db.Column(db.String(20), nullable=False, default="created", index=True)
    # status values: created, paid, expired, cancelled

    hold_expires_at = db.Column(db.DateTime, nullable=False, index=True)
    # retention of this record, unrelated to the hold
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "startAt": _iso(self.start_at),
            "durationMinutes": self.duration_minutes,
            "amount": self.amount,
            "currency": self.currency,
            "razorpayOrderId": self.razorpay_order_id,
            "status": self.status,
            "bookingId": self.booking_id,
            "expiresAt": _iso(self.hold_expires_at),
        }
