# barbershop/events.py

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppointmentChange:
    kind: str  # "insert" or "update"
    appointment_id: int
    barber_id: int
    client_id: int
    date_time: datetime
    status: str


Listener = Callable[[AppointmentChange], None]


class AppointmentFeed:
    """
    In-process change feed for appointments.

    Listeners subscribe either to every change or to one barber's changes.
    A listener that raises is logged and skipped; the others still run.
    """

    def __init__(self):
        self._listeners: List[Tuple[Optional[int], Listener]] = []

    def subscribe(self, callback: Listener, barber_id: Optional[int] = None) -> Callable[[], None]:
        entry = (barber_id, callback)
        self._listeners.append(entry)

        def unsubscribe():
            if entry in self._listeners:
                self._listeners.remove(entry)

        return unsubscribe

    def publish(self, change: AppointmentChange):
        for barber_id, callback in list(self._listeners):
            if barber_id is not None and barber_id != change.barber_id:
                continue
            try:
                callback(change)
            except Exception:
                logger.exception("Appointment listener failed for change %s", change)


def log_new_appointment(change: AppointmentChange):
    if change.kind != "insert":
        return
    logger.info(
        "New appointment for barber %s: client %s at %s",
        change.barber_id, change.client_id, change.date_time.strftime("%d/%m/%Y %H:%M"),
    )
