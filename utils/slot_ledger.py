"""
Slot-lock ledger.

Each row of ``call_slot_locks`` claims one step-sized block. The unique
constraint on ``block_start_at`` is the only thing deciding who gets a slot:
writers insert and let the database reject the loser, they never look first.
"""
import logging

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError

from models import db
from models.slot_lock import LOCK_KIND_BOOKING, LOCK_KIND_HOLD, SlotLock
from utils.slot_time import from_db, to_db

logger = logging.getLogger(__name__)


class SlotConflict(Exception):
    """A block is already held or booked by someone else."""


def _owner_filter(kind: str, owner_id: str):
    if kind == LOCK_KIND_HOLD:
        return and_(SlotLock.kind == LOCK_KIND_HOLD, SlotLock.hold_id == owner_id)
    return and_(SlotLock.kind == LOCK_KIND_BOOKING, SlotLock.booking_id == owner_id)


def _live_filter(now):
    return or_(
        SlotLock.kind == LOCK_KIND_BOOKING,
        and_(SlotLock.kind == LOCK_KIND_HOLD, SlotLock.expires_at > to_db(now)),
    )


def acquire(kind: str, blocks, owner_id: str, now, expires_at=None) -> None:
    """
    Insert one lock row per block for ``owner_id`` in a single transaction.
    Raises SlotConflict if any block is taken; nothing of this attempt survives.
    """
    if kind not in (LOCK_KIND_HOLD, LOCK_KIND_BOOKING):
        raise ValueError(f"unknown lock kind: {kind}")
    if not blocks:
        raise ValueError("no blocks to lock")

    starts = [to_db(b) for b in blocks]
    rows = [
        SlotLock(
            block_start_at=start,
            kind=kind,
            hold_id=owner_id if kind == LOCK_KIND_HOLD else None,
            booking_id=owner_id if kind == LOCK_KIND_BOOKING else None,
            expires_at=to_db(expires_at) if (kind == LOCK_KIND_HOLD and expires_at) else None,
        )
        for start in starts
    ]

    try:
        # expired holds on these exact blocks no longer count; clear them so the insert can land
        SlotLock.query.filter(
            SlotLock.block_start_at.in_(starts),
            SlotLock.kind == LOCK_KIND_HOLD,
            SlotLock.expires_at <= to_db(now),
        ).delete(synchronize_session=False)
        db.session.add_all(rows)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        release(owner_id, kind)
        logger.info("slot lock conflict kind=%s owner=%s blocks=%d", kind, owner_id, len(starts))
        raise SlotConflict("Slot already booked")


def convert(hold_id: str, booking_id: str, expected: int, now) -> bool:
    """
    Relabel the unexpired hold rows of ``hold_id`` as booking rows of ``booking_id``.
    All-or-nothing: unless exactly ``expected`` rows change, nothing is kept.
    """
    updated = (
        SlotLock.query
        .filter(
            SlotLock.kind == LOCK_KIND_HOLD,
            SlotLock.hold_id == hold_id,
            SlotLock.expires_at > to_db(now),
        )
        .update(
            {
                SlotLock.kind: LOCK_KIND_BOOKING,
                SlotLock.booking_id: booking_id,
                SlotLock.hold_id: None,
                SlotLock.expires_at: None,
            },
            synchronize_session=False,
        )
    )
    if updated != expected:
        db.session.rollback()
        logger.info("hold %s converted %d of %d blocks, discarding", hold_id, updated, expected)
        return False
    db.session.commit()
    return True


def release(owner_id: str, kind: str) -> int:
    deleted = SlotLock.query.filter(_owner_filter(kind, owner_id)).delete(synchronize_session=False)
    db.session.commit()
    return deleted


def locked_block_starts(range_start, range_end, now) -> set:
    """Block starts (aware UTC) taken by a booking or an unexpired hold."""
    rows = (
        db.session.query(SlotLock.block_start_at)
        .filter(
            SlotLock.block_start_at >= to_db(range_start),
            SlotLock.block_start_at < to_db(range_end),
            _live_filter(now),
        )
        .all()
    )
    return {from_db(r.block_start_at) for r in rows}


def owned_block_starts(owner_id: str, kind: str) -> list:
    rows = (
        db.session.query(SlotLock.block_start_at)
        .filter(_owner_filter(kind, owner_id))
        .order_by(SlotLock.block_start_at.asc())
        .all()
    )
    return [from_db(r.block_start_at) for r in rows]


def reclaim_expired(now) -> int:
    """Physically drop expired holds. Reads already ignore them."""
    deleted = (
        SlotLock.query
        .filter(SlotLock.kind == LOCK_KIND_HOLD, SlotLock.expires_at <= to_db(now))
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return deleted
