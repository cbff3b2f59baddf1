# tests/test_board.py

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from barbershop.board import SlotBoard
from barbershop.events import AppointmentChange, AppointmentFeed
from barbershop.retry import RetryPolicy

DAY = date(2025, 12, 23)  # Tuesday
NOW = datetime(2025, 12, 22, 18, 0)
WEEKLY = {"2": {"active": True, "start": "09:00", "end": "11:00"}}


class FlakyStore:
    """Appointment source that fails a set number of times before answering."""

    def __init__(self, failures=0):
        self.failures = failures
        self.calls = 0
        self.appointments = []

    def __call__(self, barber_id, day):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError("backend unavailable")
        return list(self.appointments)


def make_board(store, retry_limit=2):
    delays = []
    policy = RetryPolicy(retry_limit=retry_limit, base_delay=0.5, retry_on=(ConnectionError,), sleep=delays.append)
    board = SlotBoard(
        load_settings=lambda: (WEEKLY, {}),
        load_appointments=store,
        clock=lambda: NOW,
        retry_policy=policy,
        interval_minutes=30,
    )
    return board, delays


def change(barber_id, kind="insert"):
    return AppointmentChange(
        kind=kind, appointment_id=1, barber_id=barber_id, client_id=9,
        date_time=datetime(2025, 12, 23, 9, 30), status="pending",
    )


def test_select_loads_slots():
    store = FlakyStore()
    store.appointments = [SimpleNamespace(barber_id=1, date_time=datetime(2025, 12, 23, 10, 0))]
    board, _ = make_board(store)

    assert board.select(1, DAY) is True
    assert board.state == "ready"
    assert board.booking_enabled
    assert [(s.label, s.taken) for s in board.slots] == [
        ("09:00", False), ("09:30", False), ("10:00", True), ("10:30", False),
    ]


def test_transient_failures_are_retried_with_backoff():
    store = FlakyStore(failures=2)
    board, delays = make_board(store, retry_limit=2)

    assert board.select(1, DAY) is True
    assert store.calls == 3
    assert delays == [0.5, 1.0]


def test_exhausted_retries_disable_booking():
    store = FlakyStore(failures=10)
    board, delays = make_board(store, retry_limit=2)

    assert board.select(1, DAY) is False
    assert board.state == "error"
    assert board.slots == []
    assert not board.booking_enabled
    assert "backend unavailable" in board.error
    assert store.calls == 3


def test_stale_result_is_dropped():
    board, _ = make_board(FlakyStore())
    board.barber_id, board.day = 1, DAY

    older = board.begin()
    newer = board.begin()
    rule, fresh = board.compute(1, DAY)

    assert board.apply(newer, rule, fresh) is True
    assert board.apply(older, rule, []) is False
    assert board.slots == fresh
    assert board.state == "ready"


def test_stale_failure_does_not_clobber_newer_result():
    board, _ = make_board(FlakyStore())
    board.barber_id, board.day = 1, DAY

    older = board.begin()
    newer = board.begin()
    rule, slots = board.compute(1, DAY)
    board.apply(newer, rule, slots)

    assert board.fail(older, ConnectionError("late")) is False
    assert board.state == "ready"


def test_feed_change_for_selected_barber_reloads():
    store = FlakyStore()
    board, _ = make_board(store)
    feed = AppointmentFeed()
    board.watch(feed)
    board.select(1, DAY)
    assert not any(s.taken for s in board.slots)

    store.appointments = [SimpleNamespace(barber_id=1, date_time=datetime(2025, 12, 23, 9, 30))]
    feed.publish(change(1))

    assert [s.label for s in board.slots if s.taken] == ["09:30"]
    assert store.calls == 2


def test_feed_change_for_other_barber_is_ignored():
    store = FlakyStore()
    board, _ = make_board(store)
    feed = AppointmentFeed()
    unsubscribe = board.watch(feed)
    board.select(1, DAY)

    feed.publish(change(2))
    assert store.calls == 1

    unsubscribe()
    feed.publish(change(1))
    assert store.calls == 1


def test_closed_day_skips_occupancy_fetch():
    store = FlakyStore(failures=10)
    board, _ = make_board(store)

    assert board.select(1, date(2025, 12, 21)) is True  # Sunday
    assert board.slots == []
    assert board.rule.active is False
    assert store.calls == 0


def test_refresh_without_selection():
    board, _ = make_board(FlakyStore())
    with pytest.raises(RuntimeError):
        board.refresh()
