import logging

from sqlalchemy.exc import IntegrityError

from models import db
from models.call_booking import CallBooking
from models.refund_request import REFUND_STATUSES, RefundRequest
from services.errors import (
    BookingValidationError,
    DuplicateRequestError,
    InvalidStateError,
    NotFoundError,
    ProviderNotConfiguredError,
)
from utils.call_config import clamp_int
from utils.call_validation import is_valid_email, normalize_email
from utils.razorpay import PaymentProviderError
from utils.slot_time import to_db

logger = logging.getLogger(__name__)


def _clean(value):
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _lookup_booking(booking_id, payment_id, order_id):
    if booking_id:
        return db.session.get(CallBooking, booking_id)
    if payment_id:
        return CallBooking.query.filter_by(razorpay_payment_id=payment_id).first()
    if order_id:
        return CallBooking.query.filter_by(razorpay_order_id=order_id).first()
    return None


def create_refund_request(payload) -> RefundRequest:
    payload = payload if isinstance(payload, dict) else {}
    email = payload.get("email")
    if not is_valid_email(email):
        raise BookingValidationError("Valid email is required")

    booking_id = _clean(payload.get("bookingId"))
    order_id = _clean(payload.get("razorpayOrderId"))
    payment_id = _clean(payload.get("razorpayPaymentId"))
    if not (booking_id or order_id or payment_id):
        raise BookingValidationError("Provide bookingId, razorpayOrderId, or razorpayPaymentId")

    email = normalize_email(email)
    booking = _lookup_booking(booking_id, payment_id, order_id)
    # only link a booking the requester actually owns
    if booking and booking.email.lower() != email:
        booking = None

    rr = RefundRequest(
        kind="call",
        name=_clean(payload.get("name")),
        email=email,
        reason=_clean(payload.get("reason")),
        booking_id=booking.id if booking else None,
        razorpay_order_id=(booking.razorpay_order_id if booking else None) or order_id,
        razorpay_payment_id=(booking.razorpay_payment_id if booking else None) or payment_id,
        amount_minor=booking.amount if booking else None,
        currency=booking.currency if booking else None,
        status="requested",
    )
    db.session.add(rr)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise DuplicateRequestError("Refund request already exists")
    return rr


def list_refund_requests(status=None, limit=100, skip=0):
    limit = clamp_int(limit, 100, 1, 500)
    skip = clamp_int(skip, 0, 0, 100_000)
    q = RefundRequest.query
    if status in REFUND_STATUSES:
        q = q.filter(RefundRequest.status == status)
    total = q.count()
    rows = q.order_by(RefundRequest.created_at.desc()).offset(skip).limit(limit).all()
    return rows, total, limit, skip


def _get_requested(request_id) -> RefundRequest:
    rr = db.session.get(RefundRequest, request_id)
    if not rr:
        raise NotFoundError("Refund request not found")
    if rr.status != "requested":
        raise InvalidStateError(f"Refund request is {rr.status}")
    return rr


def approve_refund_request(request_id, *, gateway, now):
    """Refund through Razorpay; returns (refund_request, provider_refund)."""
    if not gateway.is_configured:
        raise ProviderNotConfiguredError("Razorpay is not configured.")

    rr = _get_requested(request_id)
    booking = _lookup_booking(rr.booking_id, rr.razorpay_payment_id, rr.razorpay_order_id)

    payment_id = (booking.razorpay_payment_id if booking else None) or rr.razorpay_payment_id
    amount = booking.amount if booking and booking.amount else (rr.amount_minor or 0)
    currency = (booking.currency if booking else None) or rr.currency

    if not payment_id:
        raise BookingValidationError("Missing razorpayPaymentId")
    if amount <= 0:
        raise BookingValidationError("Invalid refund amount")

    try:
        refund = gateway.create_refund(
            payment_id,
            amount,
            notes={
                "email": rr.email,
                "kind": rr.kind,
                "bookingId": (booking.id if booking else rr.booking_id) or "",
                "requestId": str(rr.id),
            },
        )
    except PaymentProviderError as exc:
        rr.status = "failed"
        rr.admin_note = str(exc)[:500]
        rr.processed_at = to_db(now)
        db.session.commit()
        raise

    rr.status = "refunded"
    rr.refund_id = refund.get("id")
    rr.processed_at = to_db(now)
    rr.amount_minor = amount
    rr.currency = currency
    db.session.commit()
    logger.info("Refund %s issued for payment %s", rr.refund_id, payment_id)
    return rr, refund


def reject_refund_request(request_id, note=None, *, now):
    rr = _get_requested(request_id)
    rr.status = "rejected"
    rr.admin_note = _clean(note)
    rr.processed_at = to_db(now)
    db.session.commit()
    return rr
