# barbershop/board.py

import logging
from datetime import date, datetime
from typing import Callable, Iterable, List, Mapping, Optional, Tuple

from barbershop.config import SLOT_MINUTES
from barbershop.core import generate_slots, occupied_instants, resolve_day_rule
from barbershop.events import AppointmentChange, AppointmentFeed
from barbershop.retry import RetryPolicy, retry_with_policy
from barbershop.schemas import DayRule, Slot

logger = logging.getLogger(__name__)

SettingsLoader = Callable[[], Tuple[Mapping, Mapping]]
AppointmentsLoader = Callable[[int, date], Iterable]


class SlotBoard:
    """
    Slot view for one selected barber and date.

    Every load takes a new generation token; a result carrying an older token
    is dropped, so a slow earlier load can never overwrite a newer one.
    When the occupancy fetch keeps failing the board ends in the ``error``
    state with no slots and booking disabled.

    The HTTP slots endpoint builds a throwaway board per request. A
    long-lived holder (a websocket session, a kiosk screen) keeps one board
    and calls ``watch(app.state.appointment_feed)`` so bookings and
    cancellations re-run the load; its loaders must open their own sessions.

    States: idle -> loading -> ready | error
    """

    def __init__(
        self,
        load_settings: SettingsLoader,
        load_appointments: AppointmentsLoader,
        clock: Callable[[], datetime],
        retry_policy: Optional[RetryPolicy] = None,
        interval_minutes: int = SLOT_MINUTES,
    ):
        self.load_settings = load_settings
        self.load_appointments = load_appointments
        self.clock = clock
        self.retry_policy = retry_policy or RetryPolicy()
        self.interval_minutes = interval_minutes

        self.barber_id: Optional[int] = None
        self.day: Optional[date] = None
        self.rule: DayRule = DayRule(active=False)
        self.slots: List[Slot] = []
        self.state = "idle"
        self.error: Optional[str] = None
        self._generation = 0

    @property
    def booking_enabled(self) -> bool:
        return self.state == "ready"

    def select(self, barber_id: int, day: date) -> bool:
        self.barber_id = barber_id
        self.day = day
        return self.refresh()

    def begin(self) -> int:
        self._generation += 1
        self.state = "loading"
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def apply(self, token: int, rule: DayRule, slots: List[Slot]) -> bool:
        if not self.is_current(token):
            logger.debug("Dropping stale slot load %d (current %d)", token, self._generation)
            return False
        self.rule = rule
        self.slots = slots
        self.state = "ready"
        self.error = None
        return True

    def fail(self, token: int, error: Exception) -> bool:
        if not self.is_current(token):
            return False
        self.slots = []
        self.state = "error"
        self.error = str(error)
        return True

    def compute(self, barber_id: int, day: date) -> Tuple[DayRule, List[Slot]]:
        weekly_schedule, overrides = self.load_settings()
        rule = resolve_day_rule(day, weekly_schedule, overrides)
        if not rule.active:
            return rule, []
        appointments = self.load_appointments(barber_id, day)
        occupied = occupied_instants(barber_id, day, appointments)
        return rule, generate_slots(day, rule, occupied, self.clock(), self.interval_minutes)

    def refresh(self) -> bool:
        if self.barber_id is None or self.day is None:
            raise RuntimeError("select a barber and date before refreshing")
        token = self.begin()
        try:
            rule, slots = retry_with_policy(self.retry_policy, self.compute, self.barber_id, self.day)
        except self.retry_policy.retry_on as e:
            logger.error("Slots for barber %s on %s unavailable: %s", self.barber_id, self.day, e)
            self.fail(token, e)
            return False
        return self.apply(token, rule, slots)

    def on_appointment_change(self, change: AppointmentChange):
        if change.barber_id != self.barber_id or self.day is None:
            return
        logger.debug("Appointment %s changed, reloading slots", change.appointment_id)
        self.refresh()

    def watch(self, feed: AppointmentFeed) -> Callable[[], None]:
        return feed.subscribe(self.on_appointment_change)
