from .db import db
from .audit_log import AuditLog
from .call_booking import CallBooking
from .call_checkout import CallCheckout
from .slot_lock import SlotLock
from .refund_request import RefundRequest
