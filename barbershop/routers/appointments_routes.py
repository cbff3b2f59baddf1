# barbershop/routers/appointments_routes.py

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import Appointment, User
from barbershop.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    StatusUpdate,
)
from barbershop.auth import get_current_user
from barbershop.config import SLOT_MINUTES
from barbershop.core import find_slot, occupied_instants, to_local_naive
from barbershop.data import SERVICES, STATUS_FILTERS
from barbershop.deps import require_role, get_clock, get_retry_policy, get_appointment_feed
from barbershop.events import AppointmentChange, AppointmentFeed
from barbershop.retry import RetryPolicy, retry_with_policy
from barbershop.store import live_appointments, shop_hours

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["appointments"],
)

TRANSITIONS = {
    "pending": ("confirmed", "cancelled"),
    "confirmed": ("completed", "cancelled"),
}


def _publish(feed: AppointmentFeed, kind: str, appt: Appointment):
    feed.publish(AppointmentChange(
        kind=kind,
        appointment_id=appt.id,
        barber_id=appt.barber_id,
        client_id=appt.client_id,
        date_time=appt.date_time,
        status=appt.status,
    ))


@router.post("/barbers/{barber_id}/appointments", response_model=AppointmentPublic, status_code=201)
def client_create_appointment(
    barber_id: int,
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    clock: Callable[[], datetime] = Depends(get_clock),
    retry_policy: RetryPolicy = Depends(get_retry_policy),
    feed: AppointmentFeed = Depends(get_appointment_feed),
):
    require_role(current_user, "client")

    # 1) Validate services
    unknown = [s for s in appt.services if s not in SERVICES]
    if unknown:
        raise HTTPException(status_code=422, detail="Service not available: " + ", ".join(unknown))

    # 2) Validate barber
    barber = session.get(User, barber_id)
    if barber is None or barber.role != "barber":
        raise HTTPException(status_code=404, detail="Barber Not Found")

    # 3) Prevent booking in the past
    starts_at = to_local_naive(appt.date_time)
    now = clock()
    if starts_at <= now:
        raise HTTPException(status_code=422, detail="Cannot book an appointment in the past")

    # 4) Occupancy for the slot's day and the day before (overnight shifts)
    previous_day = starts_at.date() - timedelta(days=1)
    try:
        existing = retry_with_policy(retry_policy, live_appointments, session, barber_id, previous_day)
    except retry_policy.retry_on:
        raise HTTPException(status_code=503, detail="Could not load booked slots, please try again")
    occupied = occupied_instants(barber_id, previous_day, existing)

    # 5) The instant must be a generated slot that is still free
    weekly_schedule, overrides = shop_hours(session)
    slot = find_slot(starts_at, weekly_schedule, overrides, occupied, now, SLOT_MINUTES)
    if slot is None:
        raise HTTPException(status_code=422, detail="Not a bookable slot for this barber")
    if slot.taken:
        raise HTTPException(status_code=409, detail="Slot already taken")

    # 6) Create and save appointment; the unique index settles concurrent bookings
    db_appt = Appointment(
        client_id=current_user["id"],
        barber_id=barber_id,
        date_time=starts_at,
        status="pending",
        services=list(appt.services),
        total_price=sum(SERVICES[s]["price"] for s in appt.services),
    )

    session.add(db_appt)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.info("Lost booking race for barber %s at %s", barber_id, starts_at)
        raise HTTPException(status_code=409, detail="Slot was just booked by someone else, refresh the slots")

    session.refresh(db_appt)
    _publish(feed, "insert", db_appt)
    return db_appt


@router.patch("/appointments/{appt_id}/status", response_model=AppointmentPublic)
def update_status(
    appt_id: int,
    body: StatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    feed: AppointmentFeed = Depends(get_appointment_feed),
):
    require_role(current_user, "barber")

    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    if target.barber_id != current_user["id"]:
        raise HTTPException(status_code=403, detail="Forbidden")

    new_status = body.status.value
    if new_status not in TRANSITIONS.get(target.status, ()):
        raise HTTPException(status_code=409, detail=f"Cannot change status from {target.status} to {new_status}")

    target.status = new_status
    session.add(target)
    session.commit()
    session.refresh(target)

    logger.info("Appointment %s is now %s", target.id, target.status)
    _publish(feed, "update", target)
    return target


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
    feed: AppointmentFeed = Depends(get_appointment_feed),
):
    # 1) Find the appointment in DB
    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")

    # 2) Already cancelled or done?
    if target.status == "cancelled":
        raise HTTPException(status_code=409, detail="Appointment already cancelled")
    if target.status == "completed":
        raise HTTPException(status_code=409, detail="Appointment already completed")

    # 3) Authorization: client who booked OR barber
    user_id = current_user["id"]
    if user_id != target.client_id and user_id != target.barber_id:
        raise HTTPException(status_code=403, detail="Forbidden")

    # 4) Cancel and persist
    target.status = "cancelled"
    session.add(target)
    session.commit()
    session.refresh(target)

    _publish(feed, "update", target)
    return target


@router.get("/clients/me/appointments", response_model=List[AppointmentPublic])
def list_my_appointments(
    status: Optional[str] = "all",
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail="status must be one of: " + ", ".join(STATUS_FILTERS))

    stmt = select(Appointment).where(Appointment.client_id == current_user["id"])

    if status != "all":
        stmt = stmt.where(Appointment.status == status)

    return session.exec(stmt.order_by(Appointment.date_time)).all()
