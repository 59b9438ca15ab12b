from flask import Blueprint, request, jsonify

from services.refunds import create_refund_request
from utils.audit import log_event

refunds_bp = Blueprint("refunds", __name__, url_prefix="/refunds")


@refunds_bp.post("")
def request_refund():
    data = request.get_json(silent=True) or {}
    rr = create_refund_request(data)

    log_event("REFUND_REQUEST_CREATE", entity="refund_request", entity_id=rr.id,
              metadata={"booking_id": rr.booking_id})
    return jsonify(request=rr.to_dict()), 201
