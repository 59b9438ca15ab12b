from flask import Blueprint, request, jsonify

from security.admin_auth import require_admin
from services.refunds import approve_refund_request, list_refund_requests, reject_refund_request
from utils.audit import log_event
from utils.calls_context import current_calls

admin_refunds_bp = Blueprint("admin_refunds", __name__, url_prefix="/admin/refunds")


@admin_refunds_bp.get("")
@require_admin
def admin_list_refunds():
    rows, total, limit, skip = list_refund_requests(
        status=(request.args.get("status") or "").strip() or None,
        limit=request.args.get("limit"),
        skip=request.args.get("skip"),
    )
    return jsonify(requests=[r.to_dict() for r in rows], total=total, limit=limit, skip=skip), 200


@admin_refunds_bp.post("/<int:request_id>/approve")
@require_admin
def admin_approve_refund(request_id: int):
    calls = current_calls()
    rr, refund = approve_refund_request(request_id, gateway=calls.gateway, now=calls.clock())

    log_event("ADMIN_REFUND_APPROVE", entity="refund_request", entity_id=rr.id,
              metadata={"refund_id": rr.refund_id, "amount": rr.amount_minor})
    return jsonify(request=rr.to_dict(), refund=refund), 200


@admin_refunds_bp.post("/<int:request_id>/reject")
@require_admin
def admin_reject_refund(request_id: int):
    calls = current_calls()
    data = request.get_json(silent=True) or {}
    rr = reject_refund_request(request_id, data.get("note"), now=calls.clock())

    log_event("ADMIN_REFUND_REJECT", entity="refund_request", entity_id=rr.id)
    return jsonify(request=rr.to_dict()), 200
