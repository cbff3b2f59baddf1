# tests/test_events.py

import logging
from datetime import datetime

from barbershop.events import AppointmentChange, AppointmentFeed, log_new_appointment


def make_change(barber_id=1, kind="insert"):
    return AppointmentChange(
        kind=kind, appointment_id=5, barber_id=barber_id, client_id=3,
        date_time=datetime(2025, 12, 23, 14, 0), status="pending",
    )


def test_barber_scoped_subscription():
    feed = AppointmentFeed()
    everything, only_two = [], []
    feed.subscribe(everything.append)
    feed.subscribe(only_two.append, barber_id=2)

    feed.publish(make_change(barber_id=1))
    feed.publish(make_change(barber_id=2))

    assert [c.barber_id for c in everything] == [1, 2]
    assert [c.barber_id for c in only_two] == [2]


def test_failing_listener_does_not_stop_others(caplog):
    feed = AppointmentFeed()
    received = []

    def broken(change):
        raise RuntimeError("listener bug")

    feed.subscribe(broken)
    feed.subscribe(received.append)

    with caplog.at_level(logging.ERROR, logger="barbershop.events"):
        feed.publish(make_change())

    assert len(received) == 1
    assert "listener failed" in caplog.text


def test_new_appointment_notice_is_logged(caplog):
    with caplog.at_level(logging.INFO, logger="barbershop.events"):
        log_new_appointment(make_change(kind="update"))
        assert caplog.text == ""
        log_new_appointment(make_change())
    assert "New appointment for barber 1" in caplog.text
    assert "23/12/2025 14:00" in caplog.text
