# barbershop/routers/users_routes.py

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from barbershop.db import get_session
from barbershop.models import User
from barbershop.schemas import StaffCreate, UserCreate, UserPublic, UserRole
from barbershop.auth import get_current_user, hash_password
from barbershop.deps import require_role

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["users"],
)


def _create_user(session: Session, user: UserCreate) -> dict:
    # 1) Check if email already exists
    existing = session.exec(
        select(User).where(User.email == user.email)
    ).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Email already registered")

    # 2) Create user in DB
    db_user = User(
        email=user.email,
        full_name=user.full_name,
        password_hash=hash_password(user.password),
        role=user.role.value,
    )

    session.add(db_user)
    session.commit()
    session.refresh(db_user)  # fills db_user.id
    logger.info("Registered %s %s", db_user.role, db_user.email)

    # 3) Return public user
    return {
        "id": db_user.id,
        "email": db_user.email,
        "full_name": db_user.full_name,
        "role": db_user.role,
    }


@router.get("/me", response_model=UserPublic)
def me(current_user: dict = Depends(get_current_user)):
    return {
        "id": current_user["id"],
        "email": current_user["email"],
        "full_name": current_user["full_name"],
        "role": current_user["role"],
    }


@router.post("/users", status_code=201, response_model=UserPublic)
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    # public signup only makes clients
    if user.role != UserRole.client:
        logger.warning("Rejected public signup of %s as %s", user.email, user.role.value)
        raise HTTPException(status_code=403, detail="Staff accounts are created by an admin")
    return _create_user(session, user)


@router.post("/users/staff", status_code=201, response_model=UserPublic)
def create_staff_user(
    user: StaffCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "admin")
    return _create_user(session, user)
