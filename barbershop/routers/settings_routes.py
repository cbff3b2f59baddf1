# barbershop/routers/settings_routes.py

import calendar
import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from barbershop.db import get_session
from barbershop.models import ShopSettings
from barbershop.schemas import DayRule, DayConfig, ShopSettingsPublic, WeeklySchedule
from barbershop.auth import get_current_user
from barbershop.deps import require_role
from barbershop.core import find_override, resolve_day_rule
from barbershop.store import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/settings",
    tags=["settings"],
)


def _public(settings: ShopSettings) -> dict:
    return {
        "schedule": settings.schedule or {},
        "date_overrides": settings.date_overrides or {},
    }


def _day_config(day: date, settings: ShopSettings) -> dict:
    overrides = settings.date_overrides or {}
    rule = resolve_day_rule(day, settings.schedule or {}, overrides)
    return {
        "date": day,
        "active": rule.active,
        "start": rule.start,
        "end": rule.end,
        "is_override": find_override(day, overrides) is not None,
    }


@router.get("", response_model=ShopSettingsPublic)
def read_settings(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return _public(get_settings(session))


@router.put("/schedule", response_model=ShopSettingsPublic)
def update_schedule(
    body: WeeklySchedule,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    settings = get_settings(session)
    # JSON object keys are strings
    settings.schedule = {str(day): rule.model_dump() for day, rule in body.schedule.items()}
    session.add(settings)
    session.commit()
    session.refresh(settings)

    logger.info("Weekly schedule updated by %s", current_user["email"])
    return _public(settings)


@router.put("/overrides/{day}", response_model=ShopSettingsPublic)
def set_override(
    day: date,
    rule: DayRule,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    settings = get_settings(session)
    # reassign so the JSON column is flagged dirty
    settings.date_overrides = {**(settings.date_overrides or {}), day.isoformat(): rule.model_dump()}
    session.add(settings)
    session.commit()
    session.refresh(settings)

    logger.info("Override for %s set to %s", day, rule.model_dump())
    return _public(settings)


@router.delete("/overrides/{day}", response_model=ShopSettingsPublic)
def clear_override(
    day: date,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")

    settings = get_settings(session)
    overrides = dict(settings.date_overrides or {})
    if day.isoformat() not in overrides:
        raise HTTPException(status_code=404, detail="No override for that date")

    del overrides[day.isoformat()]
    settings.date_overrides = overrides
    session.add(settings)
    session.commit()
    session.refresh(settings)

    logger.info("Override for %s removed, weekly default restored", day)
    return _public(settings)


@router.get("/days/{day}", response_model=DayConfig)
def read_day(
    day: date,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return _day_config(day, get_settings(session))


@router.get("/calendar", response_model=List[DayConfig])
def read_calendar(
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    settings = get_settings(session)
    _, days_in_month = calendar.monthrange(year, month)
    return [_day_config(date(year, month, d), settings) for d in range(1, days_in_month + 1)]
