# tests/test_users_api.py

import pytest
from sqlmodel import Session, select

from barbershop.models import User
from barbershop.store import ensure_admin

PASSWORD = "secret-pass-123"


def signup(client, email, full_name=""):
    resp = client.post("/users", json={"email": email, "password": PASSWORD, "full_name": full_name})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_signup_creates_a_client(client):
    user = signup(client, "bia@client.test", "Bia")
    assert user["role"] == "client"

    token = client.post("/auth/login", data={"username": "bia@client.test", "password": PASSWORD}).json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}
    me = client.get("/me", headers=headers).json()
    assert me == {"id": user["id"], "email": "bia@client.test", "full_name": "Bia", "role": "client"}


@pytest.mark.parametrize("role", ["admin", "barber"])
def test_signup_cannot_pick_a_staff_role(client, role):
    resp = client.post("/users", json={
        "email": "mallory@evil.test", "password": PASSWORD, "role": role,
    })
    assert resp.status_code == 403

    # no account was made, so no way into the admin calendar
    resp = client.post("/auth/login", data={"username": "mallory@evil.test", "password": PASSWORD})
    assert resp.status_code == 401


def test_duplicate_email(client, customer):
    resp = client.post("/users", json={"email": "ana@client.test", "password": PASSWORD})
    assert resp.status_code == 409


def test_admin_creates_staff(client, admin):
    _, headers = admin
    resp = client.post("/users/staff", headers=headers, json={
        "email": "caio@shop.test", "password": PASSWORD, "full_name": "Caio", "role": "barber",
    })
    assert resp.status_code == 201
    assert resp.json()["role"] == "barber"
    assert [b["email"] for b in client.get("/barbers").json()] == ["caio@shop.test"]


def test_only_admin_creates_staff(client, barber, customer):
    body = {"email": "eve@shop.test", "password": PASSWORD, "role": "admin"}
    assert client.post("/users/staff", json=body).status_code == 401
    for _, headers in (barber, customer):
        assert client.post("/users/staff", headers=headers, json=body).status_code == 403


def test_ensure_admin_is_idempotent(engine):
    with Session(engine) as session:
        first = ensure_admin(session, "boss@shop.test", PASSWORD)
        second = ensure_admin(session, "boss@shop.test", "another-password")
        assert first.id == second.id
        admins = session.exec(select(User).where(User.role == "admin")).all()
        assert len(admins) == 1
