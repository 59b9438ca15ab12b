"""
Paid call bookings.

A checkout holds the slot for ``hold_minutes`` while the customer pays
through Razorpay. Verification turns the hold into a booking. If the hold
lapsed and someone else took the slot in the meantime the money is still
captured, so the booking is stored as cancelled + paid for a refund instead
of being dropped.

Verification first claims the payment by inserting a pending booking; only
the call that wins that insert touches the slot ledger.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError

from models import db
from models.call_booking import CallBooking
from models.call_checkout import CallCheckout
from models.slot_lock import LOCK_KIND_BOOKING, LOCK_KIND_HOLD
from services.bookings import new_id, validated_request
from services.errors import (
    BookingValidationError,
    NotFoundError,
    PaymentIntegrityError,
    PaymentsDisabledError,
    ProviderNotConfiguredError,
    SlotConflictError,
)
from utils import slot_ledger
from utils.slot_time import add_minutes, from_db, required_blocks, to_db, to_iso

logger = logging.getLogger(__name__)

SLOT_GONE_MESSAGE = "Payment received, but the selected slot is no longer available. Please check your email."
SLOT_UNCONFIRMED_MESSAGE = "Payment received, but we could not confirm the slot. Please check your email."


@dataclass
class CheckoutCreated:
    checkout: CallCheckout
    key_id: str

    def to_dict(self, time_zone: str):
        return {
            "checkout": {"id": self.checkout.id, "expiresAt": self.checkout.to_dict()["expiresAt"]},
            "razorpay": {
                "keyId": self.key_id,
                "orderId": self.checkout.razorpay_order_id,
                "amount": self.checkout.amount,
                "currency": self.checkout.currency,
            },
            "timeZone": time_zone,
        }


@dataclass
class VerifyResult:
    booking: CallBooking
    message: Optional[str] = None
    created: bool = False

    def to_dict(self):
        out = {"booking": self.booking.to_dict()}
        if self.message:
            out["message"] = self.message
        return out


def create_checkout(payload, *, call_config, gateway, now, retention_days: int = 30) -> CheckoutCreated:
    parsed = validated_request(payload, call_config, now)

    if not call_config.require_payment:
        raise PaymentsDisabledError("Payments are disabled.")
    if not gateway.is_configured:
        raise ProviderNotConfiguredError("Razorpay is not configured.")

    amount = call_config.price_for(parsed.duration_minutes)
    currency = call_config.currency
    if amount <= 0:
        raise BookingValidationError("Invalid call price configuration.")

    hold_id = new_id()
    hold_expires_at = add_minutes(now, call_config.hold_minutes)

    try:
        slot_ledger.acquire(LOCK_KIND_HOLD, parsed.blocks, hold_id, now=now, expires_at=hold_expires_at)
    except slot_ledger.SlotConflict:
        raise SlotConflictError("Slot already booked")

    try:
        order = gateway.create_order(
            amount=amount,
            currency=currency,
            receipt=f"call_{hold_id}",
            notes={
                "startAt": to_iso(parsed.start_at),
                "durationMinutes": str(parsed.duration_minutes),
                "topic": parsed.topic,
            },
        )
        checkout = CallCheckout(
            id=hold_id,
            start_at=to_db(parsed.start_at),
            duration_minutes=parsed.duration_minutes,
            name=parsed.name,
            email=parsed.email,
            topic=parsed.topic,
            title=parsed.title,
            amount=amount,
            currency=currency,
            razorpay_order_id=order["id"],
            status="created",
            hold_expires_at=to_db(hold_expires_at),
            expires_at=to_db(now + timedelta(days=retention_days)),
        )
        db.session.add(checkout)
        db.session.commit()
    except Exception:
        db.session.rollback()
        slot_ledger.release(hold_id, LOCK_KIND_HOLD)
        logger.exception("Checkout %s failed after hold, released", hold_id)
        raise

    logger.info("Checkout %s created for order %s", checkout.id, checkout.razorpay_order_id)
    return CheckoutCreated(checkout=checkout, key_id=gateway.public_config()["keyId"])


def _required_text(payload: dict, key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BookingValidationError(f"{key} is required")
    return value.strip()


def _check_payment(payment: dict, checkout: CallCheckout, order_id: str) -> None:
    if payment.get("order_id") and payment["order_id"] != order_id:
        raise PaymentIntegrityError("Payment/order mismatch")
    if payment.get("amount") != checkout.amount or payment.get("currency") != checkout.currency:
        raise PaymentIntegrityError("Payment amount mismatch")
    captured = payment.get("captured") is True or str(payment.get("status")).lower() == "captured"
    if not captured:
        raise PaymentIntegrityError(f"Payment is not captured (status: {payment.get('status')})")


def _mark_paid(checkout: CallCheckout, payment_id: str, booking_id: str, now, retention_days: int) -> None:
    checkout.status = "paid"
    checkout.razorpay_payment_id = payment_id
    checkout.booking_id = booking_id
    checkout.expires_at = to_db(now + timedelta(days=retention_days))
    db.session.commit()


def _materialize_slot(checkout: CallCheckout, booking_id: str, blocks, now) -> bool:
    """Move the checkout's hold onto ``booking_id``; False when the slot is gone."""
    if slot_ledger.convert(checkout.id, booking_id, len(blocks), now):
        return True
    # hold lapsed (fully or partly): drop what is left of it and lock directly
    slot_ledger.release(checkout.id, LOCK_KIND_HOLD)
    try:
        slot_ledger.acquire(LOCK_KIND_BOOKING, blocks, booking_id, now=now)
    except slot_ledger.SlotConflict:
        return False
    return True


def _find_paid_booking(order_id: str, payment_id: str):
    return CallBooking.query.filter_by(razorpay_order_id=order_id, razorpay_payment_id=payment_id).first()


def _claim_payment(checkout: CallCheckout, payment_id: str, now) -> Optional[CallBooking]:
    """
    Insert the booking for this payment as ``pending``. The unique
    (order, payment) constraint lets exactly one verify call win; the others
    get None and must not touch the ledger.
    """
    booking = CallBooking(
        id=new_id(),
        start_at=checkout.start_at,
        duration_minutes=checkout.duration_minutes,
        name=checkout.name,
        email=checkout.email,
        topic=checkout.topic,
        title=checkout.title,
        status="pending",
        payment_provider="razorpay",
        payment_status="paid",
        amount=checkout.amount,
        currency=checkout.currency,
        razorpay_order_id=checkout.razorpay_order_id,
        razorpay_payment_id=payment_id,
        paid_at=to_db(now),
    )
    db.session.add(booking)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return None
    return booking


def _lost_slot_message(booking: CallBooking, checkout: CallCheckout) -> Optional[str]:
    if booking.status != "cancelled" or booking.payment_status != "paid":
        return None
    if booking.paid_at and checkout.hold_expires_at <= booking.paid_at:
        return SLOT_GONE_MESSAGE
    return SLOT_UNCONFIRMED_MESSAGE


def verify_checkout(payload, *, call_config, gateway, notifier, now, retention_days: int = 30) -> VerifyResult:
    """
    Confirm a Razorpay payment for a checkout and materialize its booking.
    Safe to repeat: the same payment always resolves to the same booking.
    """
    if not isinstance(payload, dict):
        raise BookingValidationError("Request body must be a JSON object")
    checkout_id = _required_text(payload, "checkoutId")
    order_id = _required_text(payload, "razorpayOrderId")
    payment_id = _required_text(payload, "razorpayPaymentId")
    signature = _required_text(payload, "razorpaySignature")

    checkout = db.session.get(CallCheckout, checkout_id)
    if not checkout:
        raise NotFoundError("Checkout not found")

    if checkout.status == "paid" and checkout.booking_id:
        booking = db.session.get(CallBooking, checkout.booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        return VerifyResult(booking=booking, message=_lost_slot_message(booking, checkout))

    if checkout.razorpay_order_id != order_id:
        raise PaymentIntegrityError("Order mismatch")

    if not gateway.is_configured:
        raise ProviderNotConfiguredError("Razorpay is not configured.")
    if not gateway.verify_signature(order_id, payment_id, signature):
        raise PaymentIntegrityError("Invalid payment signature")

    # the signature only proves the client saw these ids; ask Razorpay what was actually paid
    _check_payment(gateway.fetch_payment(payment_id), checkout, order_id)

    existing = _find_paid_booking(order_id, payment_id)
    if existing:
        return VerifyResult(booking=existing, message=_lost_slot_message(existing, checkout))

    blocks = required_blocks(from_db(checkout.start_at), checkout.duration_minutes, call_config.step_minutes)
    if not blocks:
        raise BookingValidationError("Invalid slot duration")

    booking = _claim_payment(checkout, payment_id, now)
    if booking is None:
        # a parallel verify of the same payment owns it; only that call touches the ledger
        existing = _find_paid_booking(order_id, payment_id)
        if not existing:
            raise NotFoundError("Booking not found")
        return VerifyResult(booking=existing, message=_lost_slot_message(existing, checkout))

    slot_locked = _materialize_slot(checkout, booking.id, blocks, now)
    booking.status = "scheduled" if slot_locked else "cancelled"
    _mark_paid(checkout, payment_id, booking.id, now, retention_days)

    notifier.booking_created(booking, call_config, "call_booking_paid")

    if not slot_locked:
        logger.warning("Payment %s captured but slot lost for checkout %s", payment_id, checkout.id)
    return VerifyResult(booking=booking, message=_lost_slot_message(booking, checkout), created=True)
