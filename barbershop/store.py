# barbershop/store.py

import logging
from datetime import date, datetime
from typing import Callable, List, Mapping, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from barbershop.auth import hash_password
from barbershop.board import SlotBoard
from barbershop.core import occupancy_window
from barbershop.data import DEFAULT_SCHEDULE
from barbershop.models import SETTINGS_ID, Appointment, ShopSettings, User
from barbershop.retry import RetryPolicy

logger = logging.getLogger(__name__)


def get_settings(session: Session) -> ShopSettings:
    """The shop's settings row, or an unsaved one with the default schedule."""
    settings = session.get(ShopSettings, SETTINGS_ID)
    if settings is None:
        settings = ShopSettings(id=SETTINGS_ID, schedule=dict(DEFAULT_SCHEDULE), date_overrides={})
    return settings


def seed_settings(session: Session) -> ShopSettings:
    """Save the default settings row if the shop has none yet."""
    settings = session.get(ShopSettings, SETTINGS_ID)
    if settings is None:
        settings = get_settings(session)
        session.add(settings)
        session.commit()
        session.refresh(settings)
        logger.info("Default shop settings saved")
    return settings


def ensure_admin(session: Session, email: str, password: str, full_name: str = "Admin") -> User:
    """The admin account for ``email``, created if it does not exist."""
    user = session.exec(select(User).where(User.email == email)).first()
    if user is not None:
        if user.role != "admin":
            logger.warning("%s exists with role %s, not promoting it to admin", email, user.role)
        return user

    user = User(email=email, full_name=full_name, password_hash=hash_password(password), role="admin")
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Created admin account %s", email)
    return user


def live_appointments(session: Session, barber_id: int, day: date) -> List[Appointment]:
    """Non-cancelled appointments of a barber that can occupy slots of ``day``."""
    window_start, window_end = occupancy_window(day)
    try:
        return session.exec(
            select(Appointment)
            .where(Appointment.barber_id == barber_id)
            .where(Appointment.date_time >= window_start)
            .where(Appointment.date_time < window_end)
            .where(Appointment.status != "cancelled")
            .order_by(Appointment.date_time)
        ).all()
    except SQLAlchemyError:
        # a failed statement leaves the transaction unusable for a retry
        logger.warning("Appointment query for barber %s on %s failed", barber_id, day)
        session.rollback()
        raise


def shop_hours(session: Session) -> Tuple[Mapping, Mapping]:
    """(weekly schedule, date overrides) of the shop."""
    settings = get_settings(session)
    return settings.schedule or {}, settings.date_overrides or {}


def slot_board(session: Session, clock: Callable[[], datetime], retry_policy: RetryPolicy) -> SlotBoard:
    """A SlotBoard reading settings and appointments through ``session``."""
    return SlotBoard(
        load_settings=lambda: shop_hours(session),
        load_appointments=lambda barber_id, day: live_appointments(session, barber_id, day),
        clock=clock,
        retry_policy=retry_policy,
    )
