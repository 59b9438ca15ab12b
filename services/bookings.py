import logging
import uuid
from datetime import timedelta

from models import db
from models.call_booking import BOOKING_STATUSES, CallBooking
from models.slot_lock import LOCK_KIND_BOOKING
from services.errors import (
    BookingValidationError,
    InvalidStateError,
    NotFoundError,
    PaymentRequiredError,
    SlotConflictError,
)
from utils import slot_ledger
from utils.call_validation import InvalidCallRequest, ValidCallRequest, validate_call_request
from utils.slot_time import to_db

logger = logging.getLogger(__name__)

# scheduled -> completed | cancelled; a pending booking left by an interrupted verify can only be cancelled
ALLOWED_TRANSITIONS = {
    "pending": {"cancelled"},
    "scheduled": {"completed", "cancelled"},
}


def new_id() -> str:
    return uuid.uuid4().hex


def validated_request(payload, call_config, now) -> ValidCallRequest:
    match validate_call_request(payload, call_config, now):
        case ValidCallRequest() as parsed:
            return parsed
        case InvalidCallRequest(code=code, message=message):
            raise BookingValidationError(message, code=code)


def create_free_booking(payload, *, call_config, notifier, now) -> CallBooking:
    """Book without payment: lock the blocks as a booking straight away."""
    parsed = validated_request(payload, call_config, now)

    if call_config.require_payment:
        raise PaymentRequiredError("Payment required. Use /calls/checkout.")

    booking_id = new_id()
    try:
        slot_ledger.acquire(LOCK_KIND_BOOKING, parsed.blocks, booking_id, now=now)
    except slot_ledger.SlotConflict:
        raise SlotConflictError("Slot already booked")

    booking = CallBooking(
        id=booking_id,
        start_at=to_db(parsed.start_at),
        duration_minutes=parsed.duration_minutes,
        name=parsed.name,
        email=parsed.email,
        topic=parsed.topic,
        title=parsed.title,
        status="scheduled",
        payment_status="paid",
        amount=0,
        currency=call_config.currency,
    )
    db.session.add(booking)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        slot_ledger.release(booking_id, LOCK_KIND_BOOKING)
        raise

    logger.info("Free call booking %s at %s", booking.id, booking.start_at)
    notifier.booking_created(booking, call_config, "call_booking_free")
    return booking


def get_booking(booking_id: str) -> CallBooking:
    booking = db.session.get(CallBooking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found")
    return booking


def list_bookings(view: str = "upcoming", status: str = None, now=None):
    q = CallBooking.query
    if status in BOOKING_STATUSES:
        q = q.filter(CallBooking.status == status)
    if view == "upcoming" and now is not None:
        # keep calls that started within the last hour visible
        q = q.filter(CallBooking.start_at >= to_db(now - timedelta(hours=1)))
    return q.order_by(CallBooking.start_at.asc()).all()


def update_booking_status(booking_id: str, next_status: str) -> CallBooking:
    if next_status not in BOOKING_STATUSES:
        raise InvalidStateError("Invalid status")

    booking = get_booking(booking_id)
    if booking.status == next_status:
        return booking
    if next_status not in ALLOWED_TRANSITIONS.get(booking.status, set()):
        raise InvalidStateError(f"Cannot change status from {booking.status} to {next_status}")

    booking.status = next_status
    if next_status == "cancelled":
        # release() commits the status change together with the lock deletion
        released = slot_ledger.release(booking.id, LOCK_KIND_BOOKING)
        logger.info("Booking %s cancelled, released %d blocks", booking.id, released)
    else:
        db.session.commit()
    return booking
