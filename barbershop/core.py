# barbershop/core.py
"""
Slot planning: turns the shop's opening hours into bookable slots.

All functions here are pure. "Now" is always passed in, never read from the
system clock, and datetimes are naive local time.
"""

from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Mapping, Optional, Set

from barbershop.schemas import DayRule, Slot

CLOSED = DayRule(active=False)


def weekday_index(day: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return day.isoweekday() % 7


def taken_key(instant: datetime) -> str:
    """Canonical key used to compare slots with booked appointments."""
    return instant.strftime("%Y-%m-%d %H:%M")


def to_local_naive(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        return instant
    return instant.astimezone().replace(tzinfo=None)


def parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def _as_rule(value) -> DayRule:
    if isinstance(value, DayRule):
        return value
    return DayRule.model_validate(value)


def find_override(day: date, overrides: Mapping) -> Optional[DayRule]:
    key = day.isoformat()
    if key in overrides:
        return _as_rule(overrides[key])
    if day in overrides:
        return _as_rule(overrides[day])
    return None


def resolve_day_rule(day: date, weekly_schedule: Mapping, overrides: Mapping) -> DayRule:
    """
    Opening hours that apply to ``day``.

    A date override always wins. Otherwise the weekly rule for the weekday is
    used, and a weekday missing from the schedule means the shop is closed.
    Weekday keys may be ints or their string form (JSON object keys).
    """
    override = find_override(day, overrides)
    if override is not None:
        return override

    weekday = weekday_index(day)
    if weekday in weekly_schedule:
        return _as_rule(weekly_schedule[weekday])
    if str(weekday) in weekly_schedule:
        return _as_rule(weekly_schedule[str(weekday)])
    return CLOSED


def generate_slots(
    day: date,
    rule: DayRule,
    occupied: Set[str],
    now: datetime,
    interval_minutes: int = 30,
) -> List[Slot]:
    """
    Slots for ``day`` in ascending order, each flagged taken or free.

    An ``end`` that is not after ``start`` means the shift runs past midnight,
    so ``end`` moves to the next day (equal times give a 24 hour shift).
    When ``day`` is today, slots at or before ``now`` are dropped.
    Taken slots stay in the list.
    """
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    if not rule.active:
        return []

    work_start = datetime.combine(day, parse_hhmm(rule.start))
    work_end = datetime.combine(day, parse_hhmm(rule.end))
    if work_end <= work_start:
        work_end += timedelta(days=1)

    slot_delta = timedelta(minutes=interval_minutes)
    is_today = day == now.date()

    slots = []
    current = work_start
    while current < work_end:
        if not is_today or current > now:
            key = taken_key(current)
            slots.append(Slot(
                label=current.strftime("%H:%M"),
                instant=current,
                taken_key=key,
                taken=key in occupied,
            ))
        current += slot_delta
    return slots


def occupancy_window(day: date):
    # two days wide so overnight slots that roll past midnight are covered
    window_start = datetime.combine(day, time.min)
    return window_start, window_start + timedelta(days=2)


def occupied_instants(barber_id, day: date, appointments: Iterable) -> Set[str]:
    window_start, window_end = occupancy_window(day)
    occupied = set()
    for a in appointments:
        if a.barber_id != barber_id:
            continue
        starts_at = to_local_naive(a.date_time)
        if window_start <= starts_at < window_end:
            occupied.add(taken_key(starts_at))
    return occupied


def find_slot(instant: datetime, weekly_schedule: Mapping, overrides: Mapping,
              occupied: Set[str], now: datetime, interval_minutes: int = 30) -> Optional[Slot]:
    """
    The generated slot starting at ``instant``, if any.

    Checks the instant's own date and the day before, whose overnight shift
    may extend into it.
    """
    for day in (instant.date(), instant.date() - timedelta(days=1)):
        rule = resolve_day_rule(day, weekly_schedule, overrides)
        for slot in generate_slots(day, rule, occupied, now, interval_minutes):
            if slot.instant == instant:
                return slot
    return None
