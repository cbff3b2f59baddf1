# barbershop/routers/barbers_routes.py

import logging
from datetime import datetime, timedelta, date
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Appointment, User
from barbershop.schemas import AppointmentPublic, BarberPublic, BarberStats, SlotsResponse
from barbershop.auth import get_current_user
from barbershop.deps import require_role, get_clock, get_retry_policy
from barbershop.retry import RetryPolicy
from barbershop.data import STATUS_FILTERS
from barbershop.store import slot_board

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/barbers",
    tags=["barbers"],
)


@router.get("", response_model=List[BarberPublic])
def list_barbers(session: Session = Depends(get_session)):
    return session.exec(
        select(User).where(User.role == "barber").order_by(User.full_name)
    ).all()


@router.get("/me/appointments", response_model=List[AppointmentPublic])
def list_barber_appointments(
    status: Optional[str] = "all",
    on_date: Optional[date] = None,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "barber")

    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail="status must be one of: " + ", ".join(STATUS_FILTERS))

    stmt = select(Appointment).where(Appointment.barber_id == current_user["id"])

    if on_date is not None:
        day_start_dt = datetime.combine(on_date, datetime.min.time())
        day_end_dt = day_start_dt + timedelta(days=1)
        stmt = stmt.where(Appointment.date_time >= day_start_dt).where(Appointment.date_time < day_end_dt)

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    return session.exec(stmt.order_by(Appointment.date_time)).all()


@router.get("/me/stats", response_model=BarberStats)
def barber_stats(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    clock: Callable[[], datetime] = Depends(get_clock),
):
    require_role(current_user, "barber")

    appts = session.exec(
        select(Appointment).where(Appointment.barber_id == current_user["id"])
    ).all()
    today = clock().date()

    return {
        "active": sum(1 for a in appts if a.status not in ("completed", "cancelled")),
        "today": sum(1 for a in appts if a.date_time.date() == today),
        "pending": sum(1 for a in appts if a.status == "pending"),
        "revenue": sum(a.total_price or 0 for a in appts if a.status == "completed"),
    }


@router.get("/{barber_id}/slots", response_model=SlotsResponse)
def barber_slots(
    barber_id: int,
    date: date,
    session: Session = Depends(get_session),
    clock: Callable[[], datetime] = Depends(get_clock),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
):
    # 1) Lookup barber
    barber = session.get(User, barber_id)
    if barber is None or barber.role != "barber":
        raise HTTPException(status_code=404, detail="Barber Not Found")

    # 2) Resolve hours, fetch occupancy, generate slots
    board = slot_board(session, clock, retry_policy)
    if not board.select(barber_id, date):
        # occupancy unknown: never present the day as free
        raise HTTPException(status_code=503, detail="Could not load booked slots, please try again")

    return {
        "barber_id": barber_id,
        "date": date,
        "open": board.rule.active,
        "slots": board.slots,
    }
