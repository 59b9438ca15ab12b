from models.db import db, utcnow
from models.call_booking import _iso

REFUND_STATUSES = ("requested", "rejected", "refunded", "failed")


class RefundRequest(db.Model):
    __tablename__ = "refund_requests"

    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(20), nullable=False, default="call")

    name = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    reason = db.Column(db.Text, nullable=True)

    booking_id = db.Column(db.String(32), db.ForeignKey("call_bookings.id"), nullable=True, index=True)
    razorpay_order_id = db.Column(db.String(64), nullable=True, index=True)
    # NULLs do not collide, so only requests carrying a payment id are unique
    razorpay_payment_id = db.Column(db.String(64), nullable=True, unique=True)

    amount_minor = db.Column(db.Integer, nullable=True)
    currency = db.Column(db.String(10), nullable=True)

    status = db.Column(db.String(20), nullable=False, default="requested", index=True)
    admin_note = db.Column(db.String(500), nullable=True)
    refund_id = db.Column(db.String(64), nullable=True, index=True)
    processed_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "kind": self.kind,
            "name": self.name,
            "email": self.email,
            "reason": self.reason,
            "bookingId": self.booking_id,
            "razorpayOrderId": self.razorpay_order_id,
            "razorpayPaymentId": self.razorpay_payment_id,
            "amountMinor": self.amount_minor,
            "currency": self.currency,
            "status": self.status,
            "adminNote": self.admin_note,
            "refundId": self.refund_id,
            "processedAt": _iso(self.processed_at),
            "createdAt": _iso(self.created_at),
        }
