from datetime import timedelta

from models.db import db, utcnow

BOOKING_STATUSES = ("pending", "scheduled", "completed", "cancelled")


class CallBooking(db.Model):
    __tablename__ = "call_bookings"

    id = db.Column(db.String(32), primary_key=True)

    start_at = db.Column(db.DateTime, nullable=False, index=True)
    duration_minutes = db.Column(db.Integer, nullable=False)

    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    topic = db.Column(db.String(160), nullable=False)
    title = db.Column(db.String(200), nullable=False)

    status = db.Column(db.String(20), nullable=False, default="scheduled", index=True)
    # status values: pending (paid, slot not settled yet), scheduled, completed, cancelled

    payment_provider = db.Column(db.String(20), nullable=True)  # razorpay
    payment_status = db.Column(db.String(10), nullable=False, default="unpaid", index=True)
    amount = db.Column(db.Integer, nullable=False, default=0)  # smallest unit (paise)
    currency = db.Column(db.String(10), nullable=False, default="INR")

    razorpay_order_id = db.Column(db.String(64), nullable=True, index=True)
    razorpay_payment_id = db.Column(db.String(64), nullable=True, index=True)
    paid_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        # a captured payment materializes at most one booking
        db.UniqueConstraint("razorpay_order_id", "razorpay_payment_id", name="uq_call_booking_payment"),
    )

    @property
    def end_at(self):
        return self.start_at + timedelta(minutes=self.duration_minutes)

    def to_dict(self):
        return {
            "id": self.id,
            "startAt": _iso(self.start_at),
            "endAt": _iso(self.end_at),
            "durationMinutes": self.duration_minutes,
            "name": self.name,
            "email": self.email,
            "topic": self.topic,
            "title": self.title,
            "status": self.status,
            "paymentProvider": self.payment_provider,
            "paymentStatus": self.payment_status,
            "amount": self.amount,
            "currency": self.currency,
            "razorpayOrderId": self.razorpay_order_id,
            "razorpayPaymentId": self.razorpay_payment_id,
            "paidAt": _iso(self.paid_at),
            "createdAt": _iso(self.created_at),
        }


def _iso(value):
    # stored values are naive UTC
    return value.isoformat() + "Z" if value else None
