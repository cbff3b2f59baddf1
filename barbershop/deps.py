# barbershop/deps.py

from datetime import datetime
from typing import Callable

from fastapi import HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from barbershop.config import OCCUPANCY_RETRY_LIMIT, OCCUPANCY_RETRY_BASE_DELAY
from barbershop.events import AppointmentFeed
from barbershop.retry import RetryPolicy


def require_role(user: dict, *roles: str):
    if user["role"] not in roles:
        raise HTTPException(status_code=403, detail="Forbidden")


def get_clock() -> Callable[[], datetime]:
    # naive local time, like every datetime the planner handles
    return datetime.now


def get_retry_policy() -> RetryPolicy:
    return RetryPolicy(
        retry_limit=OCCUPANCY_RETRY_LIMIT,
        backoff="exponential",
        base_delay=OCCUPANCY_RETRY_BASE_DELAY,
        retry_on=(SQLAlchemyError,),
    )


def get_appointment_feed(request: Request) -> AppointmentFeed:
    return request.app.state.appointment_feed
