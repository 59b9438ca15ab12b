from flask import Blueprint, request, jsonify

from services.bookings import create_free_booking
from services.checkout import create_checkout, verify_checkout
from utils.audit import log_event
from utils.availability import list_available_slots
from utils.calls_context import current_calls

calls_bp = Blueprint("calls", __name__, url_prefix="/calls")


# ---------- PUBLIC: open slots ----------
@calls_bp.get("/availability")
def availability():
    calls = current_calls()
    duration = request.args.get("durationMinutes", type=int)
    days = request.args.get("days", type=int)

    result = list_available_slots(calls.config, duration, now=calls.clock(), days=days)
    return jsonify(result.to_dict()), 200


# ---------- PUBLIC: free booking (DOUBLE-BOOKING SAFE) ----------
@calls_bp.post("/bookings")
def create_booking():
    calls = current_calls()
    data = request.get_json(silent=True) or {}

    booking = create_free_booking(data, call_config=calls.config, notifier=calls.notifier, now=calls.clock())

    log_event("CALL_BOOKING_CREATE", entity="call_booking", entity_id=booking.id,
              metadata={"start_at": booking.start_at, "duration": booking.duration_minutes})
    return jsonify(booking=booking.to_dict()), 201


# ---------- PUBLIC: paid booking, step 1 ----------
@calls_bp.post("/checkout")
def checkout():
    calls = current_calls()
    data = request.get_json(silent=True) or {}

    created = create_checkout(
        data,
        call_config=calls.config,
        gateway=calls.gateway,
        now=calls.clock(),
        retention_days=calls.checkout_retention_days,
    )

    log_event("CALL_CHECKOUT_CREATE", entity="call_checkout", entity_id=created.checkout.id,
              metadata={"razorpay_order_id": created.checkout.razorpay_order_id})
    return jsonify(created.to_dict(calls.config.time_zone)), 201


# ---------- PUBLIC: paid booking, step 2 ----------
@calls_bp.post("/verify")
def verify():
    calls = current_calls()
    data = request.get_json(silent=True) or {}

    result = verify_checkout(
        data,
        call_config=calls.config,
        gateway=calls.gateway,
        notifier=calls.notifier,
        now=calls.clock(),
        retention_days=calls.checkout_retention_days,
    )

    if result.created:
        action = "CALL_CHECKOUT_PAID" if result.booking.status == "scheduled" else "CALL_CHECKOUT_PAID_SLOT_LOST"
        log_event(action, entity="call_booking", entity_id=result.booking.id,
                  metadata={"razorpay_payment_id": result.booking.razorpay_payment_id})
    return jsonify(result.to_dict()), 200
