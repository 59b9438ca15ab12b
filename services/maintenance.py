import logging

from models import db
from models.call_checkout import CallCheckout
from utils import slot_ledger
from utils.slot_time import to_db

logger = logging.getLogger(__name__)


def sweep_calls(now) -> dict:
    """
    Ledger hygiene: drop lapsed holds, flag unpaid checkouts whose hold ran
    out, and delete checkouts past retention. Reads never depend on this.
    """
    holds = slot_ledger.reclaim_expired(now)

    expired = (
        CallCheckout.query
        .filter(CallCheckout.status == "created", CallCheckout.hold_expires_at <= to_db(now))
        .update({CallCheckout.status: "expired"}, synchronize_session=False)
    )
    purged = (
        CallCheckout.query
        .filter(CallCheckout.expires_at <= to_db(now))
        .delete(synchronize_session=False)
    )
    db.session.commit()

    stats = {"holds": holds, "expired_checkouts": expired, "purged_checkouts": purged}
    logger.info("Call sweep: %s", stats)
    return stats
