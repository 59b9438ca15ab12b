from datetime import timedelta

from conftest import booking_body, local
from models import db
from models.call_checkout import CallCheckout
from models.slot_lock import SlotLock
from services.maintenance import sweep_calls
from utils import slot_ledger
from utils.slot_time import required_blocks


def test_sweep_drops_lapsed_holds_and_expires_checkouts(client, calls, clock):
    resp = client.post("/calls/checkout", json=booking_body(local(2026, 3, 10, 22, 0)))
    checkout_id = resp.get_json()["checkout"]["id"]
    slot_ledger.acquire("booking", required_blocks(local(2026, 3, 11, 1, 0), 30, 30), "b1", now=clock())

    # nothing lapsed yet
    assert sweep_calls(clock()) == {"holds": 0, "expired_checkouts": 0, "purged_checkouts": 0}

    clock.advance(11)
    stats = sweep_calls(clock())

    assert stats == {"holds": 2, "expired_checkouts": 1, "purged_checkouts": 0}
    assert SlotLock.query.count() == 1
    assert db.session.get(CallCheckout, checkout_id).status == "expired"


def test_sweep_purges_checkouts_past_retention(client, calls, clock):
    client.post("/calls/checkout", json=booking_body(local(2026, 3, 10, 22, 0)))

    stats = sweep_calls(clock() + timedelta(days=calls.checkout_retention_days, minutes=1))

    assert stats["purged_checkouts"] == 1
    assert CallCheckout.query.count() == 0


def test_sweep_cli(app, client):
    client.post("/calls/checkout", json=booking_body(local(2026, 3, 10, 22, 0)))
    app.extensions["calls"].clock.advance(11)

    result = app.test_cli_runner().invoke(args=["sweep-calls"])

    assert result.exit_code == 0
    assert "holds removed: 2, checkouts expired: 1, checkouts purged: 0" in result.output


def test_call_config_cli(app):
    result = app.test_cli_runner().invoke(args=["call-config"])

    assert result.exit_code == 0
    assert "time_zone=Asia/Kolkata" in result.output
    assert "require_payment=True" in result.output
