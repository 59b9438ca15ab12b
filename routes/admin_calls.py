from flask import Blueprint, request, jsonify

from security.admin_auth import require_admin
from services.bookings import list_bookings, update_booking_status
from utils.audit import log_event
from utils.calls_context import current_calls

admin_calls_bp = Blueprint("admin_calls", __name__, url_prefix="/admin/calls")


@admin_calls_bp.get("/bookings")
@require_admin
def admin_list_bookings():
    calls = current_calls()
    view = (request.args.get("view") or "upcoming").strip().lower()
    status = (request.args.get("status") or "").strip().lower() or None

    rows = list_bookings(view=view, status=status, now=calls.clock())
    return jsonify(bookings=[b.to_dict() for b in rows], timeZone=calls.config.time_zone), 200


@admin_calls_bp.patch("/bookings/<booking_id>")
@require_admin
def admin_update_booking(booking_id: str):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip().lower() if isinstance(data.get("status"), str) else ""

    booking = update_booking_status(booking_id, status)

    log_event("ADMIN_CALL_BOOKING_STATUS", entity="call_booking", entity_id=booking.id,
              metadata={"status": booking.status})
    return jsonify(booking=booking.to_dict()), 200
