# barbershop/schemas.py

import re
from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum
from datetime import datetime, date
from typing import Dict, List, Optional

HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class DayRule(BaseModel):
    active: bool = False
    start: Optional[str] = None  # "HH:MM"
    end: Optional[str] = None

    @model_validator(mode="after")
    def check_times(self):
        if not self.active:
            return self
        for name in ("start", "end"):
            value = getattr(self, name)
            if value is None or not HHMM.match(value):
                raise ValueError(f"{name} must be a 24-hour HH:MM time when the day is active")
        return self


class WeeklySchedule(BaseModel):
    schedule: Dict[int, DayRule]

    @field_validator("schedule")
    @classmethod
    def check_weekdays(cls, value):
        for day in value:
            if not (0 <= day <= 6):
                raise ValueError("weekday keys must be integers between 0 (Sunday) and 6 (Saturday)")
        return value


class ShopSettingsPublic(BaseModel):
    schedule: Dict[int, DayRule]
    date_overrides: Dict[date, DayRule]


class DayConfig(BaseModel):
    date: date
    active: bool
    start: Optional[str] = None
    end: Optional[str] = None
    is_override: bool


class Slot(BaseModel):
    label: str
    instant: datetime
    taken_key: str
    taken: bool = False


class SlotsResponse(BaseModel):
    barber_id: int
    date: date
    open: bool
    slots: List[Slot]


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    client = "client"
    barber = "barber"
    admin = "admin"


class UserPublic(BaseModel):
    id: int
    email: str
    full_name: str
    role: UserRole


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    full_name: str = ""
    role: UserRole = UserRole.client


class StaffCreate(UserCreate):
    role: UserRole


class BarberPublic(BaseModel):
    id: int
    full_name: str
    email: str


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class AppointmentCreate(BaseModel):
    date_time: datetime
    services: List[str] = Field(min_length=1)


class AppointmentPublic(BaseModel):
    id: int
    client_id: int
    barber_id: int
    date_time: datetime
    status: AppointmentStatus
    services: List[str]
    total_price: float


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class BarberStats(BaseModel):
    active: int
    today: int
    pending: int
    revenue: float
