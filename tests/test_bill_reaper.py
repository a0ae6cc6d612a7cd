import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from restopos.db import session as db_session
from restopos.db.base import Base
from restopos.models import Bill, Business, Order
from restopos.services import bill_reaper
from restopos.services.bill_reaper import reap_expired_bills, run_reaper_pass
from restopos.utils.time import next_run_at

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


class _RecordingImageStore:
    def __init__(self, fail_for: set[str] | None = None, explode_for: set[str] | None = None) -> None:
        self.deleted: list[str] = []
        self.fail_for = fail_for or set()
        self.explode_for = explode_for or set()

    def delete(self, public_id: str) -> bool:
        if public_id in self.explode_for:
            raise RuntimeError("unexpected")
        self.deleted.append(public_id)
        return public_id not in self.fail_for


def _session_local(tmp_path: Path):
    engine = create_engine(f"sqlite:///{tmp_path / 'reaper.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _add_bill(db, business: Business, expires_at: datetime | None, public_id: str | None = None, modified_id: str | None = None) -> int:
    order = Order(business_id=business.id, table_number=1, payment_method="cash", total_amount=Decimal("10.00"))
    db.add(order)
    db.flush()
    bill = Bill(
        order_id=order.id,
        business_id=business.id,
        total_amount=Decimal("10.00"),
        bill_store_link=f"https://img.test/{public_id}" if public_id else None,
        bill_store_public_id=public_id,
        modified_bill_store_public_id=modified_id,
        expires_at=expires_at,
    )
    db.add(bill)
    db.flush()
    return bill.id


def _seed(session_local, *specs) -> list[int]:
    with session_local() as db:
        business = Business(name="Spice Route")
        db.add(business)
        db.flush()
        ids = [_add_bill(db, business, *spec) for spec in specs]
        db.commit()
        return ids


def _remaining_ids(session_local) -> list[int]:
    with session_local() as db:
        return [bill.id for bill in db.query(Bill).order_by(Bill.id).all()]


def test_expired_bill_and_its_image_are_deleted(tmp_path: Path) -> None:
    session_local = _session_local(tmp_path)
    expired_id, fresh_id, _ = _seed(
        session_local,
        (NOW - timedelta(days=1), "bills/old"),
        (NOW + timedelta(hours=1), "bills/new"),
        (None, None),
    )
    store = _RecordingImageStore()

    with session_local() as db:
        deleted = reap_expired_bills(db, store, now=NOW)

    assert deleted == 1
    assert store.deleted == ["bills/old"]
    assert expired_id not in _remaining_ids(session_local)
    assert fresh_id in _remaining_ids(session_local)


def test_modified_image_is_deleted_too(tmp_path: Path) -> None:
    session_local = _session_local(tmp_path)
    _seed(session_local, (NOW, "bills/plain", "bills/modified"))
    store = _RecordingImageStore()

    with session_local() as db:
        assert reap_expired_bills(db, store, now=NOW) == 1

    assert store.deleted == ["bills/plain", "bills/modified"]


def test_row_is_deleted_even_when_image_delete_fails(tmp_path: Path) -> None:
    session_local = _session_local(tmp_path)
    _seed(session_local, (NOW - timedelta(hours=2), "bills/gone"), (NOW - timedelta(hours=2), None))
    store = _RecordingImageStore(fail_for={"bills/gone"})

    with session_local() as db:
        assert reap_expired_bills(db, store, now=NOW) == 2

    assert _remaining_ids(session_local) == []


def test_failing_bill_does_not_stop_the_batch(tmp_path: Path) -> None:
    session_local = _session_local(tmp_path)
    broken_id, ok_id = _seed(
        session_local,
        (NOW - timedelta(hours=3), "bills/broken"),
        (NOW - timedelta(hours=3), "bills/ok"),
    )
    store = _RecordingImageStore(explode_for={"bills/broken"})

    with session_local() as db:
        assert reap_expired_bills(db, store, now=NOW) == 1

    assert _remaining_ids(session_local) == [broken_id]
    assert ok_id not in _remaining_ids(session_local)


def test_run_reaper_pass_uses_configured_session_and_store(tmp_path: Path, monkeypatch) -> None:
    session_local = _session_local(tmp_path)
    _seed(session_local, (datetime.now(timezone.utc) - timedelta(minutes=5), "bills/a"))
    store = _RecordingImageStore()
    monkeypatch.setattr(db_session, "SessionLocal", session_local)
    monkeypatch.setattr(bill_reaper, "get_image_store", lambda: store)

    assert run_reaper_pass() == 1
    assert store.deleted == ["bills/a"]


def test_next_run_is_at_the_configured_minute() -> None:
    assert next_run_at(datetime(2026, 3, 2, 12, 0, 0, tzinfo=timezone.utc), 0) == datetime(2026, 3, 2, 13, 0, tzinfo=timezone.utc)
    assert next_run_at(datetime(2026, 3, 2, 12, 10, 5, tzinfo=timezone.utc), 0) == datetime(2026, 3, 2, 13, 0, tzinfo=timezone.utc)
    assert next_run_at(datetime(2026, 3, 2, 12, 10, tzinfo=timezone.utc), 30) == datetime(2026, 3, 2, 12, 30, tzinfo=timezone.utc)


def test_scheduler_runs_a_pass_after_sleeping(monkeypatch) -> None:
    calls: list[str] = []
    sleeps: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)
        if len(sleeps) > 1:
            raise asyncio.CancelledError

    def fake_pass() -> int:
        calls.append("pass")
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(bill_reaper.asyncio, "sleep", fake_sleep)
    monkeypatch.setattr(bill_reaper, "run_reaper_pass", fake_pass)

    try:
        asyncio.run(bill_reaper.run_bill_reaper_forever())
    except asyncio.CancelledError:
        pass

    assert calls == ["pass"]
    assert 0 < sleeps[0] <= 3600
