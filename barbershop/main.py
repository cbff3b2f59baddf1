# barbershop/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlmodel import Session

from barbershop.config import ADMIN_EMAIL, ADMIN_PASSWORD, LOG_LEVEL
from barbershop.db import create_db_and_tables, engine
from barbershop.events import AppointmentFeed, log_new_appointment
from barbershop.store import ensure_admin, seed_settings
from barbershop.routers import (
    appointments_routes,
    auth_routes,
    barbers_routes,
    settings_routes,
    users_routes,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    with Session(engine) as session:
        seed_settings(session)
        if ADMIN_EMAIL and ADMIN_PASSWORD:
            ensure_admin(session, ADMIN_EMAIL, ADMIN_PASSWORD)
        else:
            logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD not set, no admin account created")
    logger.info("Database ready")
    yield


app = FastAPI(title="Barbershop Booking API", lifespan=lifespan)

# in-process change feed; a push sender would subscribe here
app.state.appointment_feed = AppointmentFeed()
app.state.appointment_feed.subscribe(log_new_appointment)

app.include_router(auth_routes.router)
app.include_router(users_routes.router)
app.include_router(settings_routes.router)
app.include_router(barbers_routes.router)
app.include_router(appointments_routes.router)


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("barbershop.main:app", host="0.0.0.0", port=8000)
