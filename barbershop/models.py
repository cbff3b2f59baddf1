# barbershop/models.py

from typing import Optional, List, Dict, Any
from datetime import datetime

from sqlalchemy import DateTime, Index, text
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column

# the shop has exactly one settings row
SETTINGS_ID = 1


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    full_name: str = ""
    password_hash: str
    role: str  # client, barber or admin


class ShopSettings(SQLModel, table=True):
    __tablename__ = "shop_settings"

    id: int = Field(default=SETTINGS_ID, primary_key=True)
    # weekday ("0"=Sun .. "6"=Sat) -> {"active", "start", "end"}
    schedule: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    # "yyyy-MM-dd" -> {"active", "start", "end"}
    date_overrides: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))


class Appointment(SQLModel, table=True):
    # one live booking per barber and instant; cancelled rows free the slot
    __table_args__ = (
        Index(
            "uq_barber_slot",
            "barber_id",
            "date_time",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    client_id: int = Field(foreign_key="user.id", index=True)
    barber_id: int = Field(foreign_key="user.id", index=True)
    # naive local time; never let the column type attach or demand a tz
    date_time: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))
    status: str = "pending"
    services: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    total_price: float = 0.0
