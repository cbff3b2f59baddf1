# tests/conftest.py

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from barbershop.db import get_session
from barbershop.deps import get_clock, get_retry_policy
from barbershop.main import app
from barbershop.retry import RetryPolicy
from barbershop.store import ensure_admin

# Monday 22 Dec 2025, 10:00 local time
NOW = datetime(2025, 12, 22, 10, 0)
PASSWORD = "secret-pass-123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def client(engine, clock):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_retry_policy] = lambda: RetryPolicy(
        retry_limit=2, base_delay=0, retry_on=(SQLAlchemyError,), sleep=lambda s: None,
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email, full_name=""):
    resp = client.post("/users", json={
        "email": email,
        "password": PASSWORD,
        "full_name": full_name,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def add_staff(client, admin_headers, email, role, full_name=""):
    resp = client.post("/users/staff", headers=admin_headers, json={
        "email": email,
        "password": PASSWORD,
        "full_name": full_name,
        "role": role,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def login(client, email):
    resp = client.post("/auth/login", data={"username": email, "password": PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def admin(client, engine):
    # the first admin is bootstrapped server-side, never through signup
    with Session(engine) as session:
        db_user = ensure_admin(session, "admin@shop.test", PASSWORD, "Admin")
        user = {"id": db_user.id, "email": db_user.email, "full_name": db_user.full_name, "role": db_user.role}
    return user, login(client, user["email"])


@pytest.fixture
def barber(client, admin):
    _, admin_headers = admin
    user = add_staff(client, admin_headers, "joao@shop.test", "barber", "Joao")
    return user, login(client, user["email"])


@pytest.fixture
def other_barber(client, admin):
    _, admin_headers = admin
    user = add_staff(client, admin_headers, "pedro@shop.test", "barber", "Pedro")
    return user, login(client, user["email"])


@pytest.fixture
def customer(client):
    user = register(client, "ana@client.test", "Ana")
    return user, login(client, user["email"])
