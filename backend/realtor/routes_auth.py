"""
Login, signup, password reset and the caller's own profile.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from realtor.auth import Caller
from realtor.config import app_env, frontend_base_url, jwt_secret, primary_admin_email
from realtor.db import get_db
from realtor.errors import (
    BadRequest,
    Conflict,
    Forbidden,
    Gone,
    InvalidCredentials,
    NotFound,
    ServerMisconfigured,
)
from realtor.models import User
from realtor.schemas import (
    ChangePasswordIn,
    ForgotPasswordIn,
    LoginIn,
    ProfileUpdateIn,
    ResetPasswordIn,
    SignupIn,
)
from realtor.security import create_access_token, hash_password, hash_reset_token, new_reset_token, verify_password
from realtor.serializers import ok, user_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

DbSession = Annotated[Session, Depends(get_db)]

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."
RESET_TOKEN_INVALID = "Token is invalid or has expired."


def _require_signing_secret() -> None:
    # Checked before touching credentials so a misconfigured server never
    # looks like a bad password.
    if not jwt_secret():
        raise ServerMisconfigured("Server configuration error: JWT secret not set.")


def _token_for(u: User) -> str:
    return create_access_token(user_id=u.id, email=u.email, name=u.name, role=u.role, phone=u.phone or "")


def _session_out(u: User) -> dict:
    return {"user": user_out(u), "token": _token_for(u)}


@router.post("/auth/login")
def login(data: LoginIn, db: DbSession):
    _require_signing_secret()
    email = str(data.email).strip().lower()
    u = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not u or not verify_password(data.password, u.password_hash):
        raise InvalidCredentials()
    return ok(_session_out(u), message="Login successful.")


@router.post("/auth/signup", status_code=201)
def signup(data: SignupIn, db: DbSession):
    _require_signing_secret()
    email = str(data.email).strip().lower()
    exists = db.execute(select(User.id).where(User.email == email)).scalar_one_or_none()
    if exists:
        raise Conflict("User with this email already exists.")

    role = data.role
    is_primary = bool(primary_admin_email()) and email == primary_admin_email()
    if is_primary:
        role = "admin"

    u = User(
        name=data.name.strip(),
        email=email,
        password_hash=hash_password(data.password),
        role=role,
        phone=(data.phone or "").strip(),
        is_email_verified=True,
        is_protected=is_primary,
    )
    db.add(u)
    try:
        db.flush()
    except IntegrityError:
        # Concurrent signups with the same email lose to the unique index.
        db.rollback()
        raise Conflict("User with this email already exists.")
    logger.info("Signup: user_id=%s role=%s", u.id, u.role)
    return ok(_session_out(u), message="User created successfully.")


@router.post("/auth/forgot-password")
def forgot_password(data: ForgotPasswordIn, db: DbSession):
    email = str(data.email).strip().lower()
    u = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if u:
        raw, token_hash, expires = new_reset_token()
        u.password_reset_token = token_hash
        u.password_reset_expires = expires
        db.add(u)
        logger.info("Password reset requested: user_id=%s", u.id)
        # Email delivery is not wired up; outside production the link is logged instead.
        if app_env() in {"local", "dev", "test"}:
            logger.warning("Password reset link for %s: %s/reset-password?token=%s", email, frontend_base_url(), raw)
    # Same answer whether or not the account exists.
    return ok(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/auth/reset-password")
def reset_password(data: ResetPasswordIn, db: DbSession):
    now = dt.datetime.now(dt.timezone.utc)
    u = db.execute(
        select(User).where(
            User.password_reset_token == hash_reset_token(data.token),
            User.password_reset_expires > now,
        )
    ).scalar_one_or_none()
    if not u:
        raise BadRequest(RESET_TOKEN_INVALID)
    u.password_hash = hash_password(data.password)
    u.password_reset_token = None
    u.password_reset_expires = None
    db.add(u)
    logger.info("Password reset completed: user_id=%s", u.id)
    return ok(message="Password has been reset successfully.")


@router.post("/auth/verify")
def verify_email():
    raise Gone("Email verification is no longer required.")


# -----------------------
# Profile
# -----------------------
def _me(db: Session, caller) -> User:
    u = db.get(User, caller.user_id)
    if not u:
        raise NotFound("User not found")
    return u


@router.get("/profile", tags=["profile"])
def get_profile(caller: Caller, db: DbSession):
    return ok(user_out(_me(db, caller)))


@router.put("/profile", tags=["profile"])
def update_profile(data: ProfileUpdateIn, caller: Caller, db: DbSession):
    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise BadRequest("No fields to update.")
    u = _me(db, caller)
    if data.name is not None:
        u.name = data.name.strip()
    if data.profile_picture_url is not None:
        u.profile_picture_url = data.profile_picture_url.strip()
    if data.phone is not None:
        u.phone = data.phone.strip()
    if data.specialty is not None:
        u.specialty = data.specialty.strip()
    db.add(u)
    db.flush()
    # Name/phone live in the token too, so hand back a fresh one.
    return ok({"user": user_out(u), "token": _token_for(u)}, message="Profile updated successfully.")


@router.post("/profile/change-password", tags=["profile"])
def change_password(data: ChangePasswordIn, caller: Caller, db: DbSession):
    u = _me(db, caller)
    if not verify_password(data.current_password, u.password_hash):
        raise Forbidden("Incorrect current password.")
    u.password_hash = hash_password(data.new_password)
    db.add(u)
    logger.info("Password changed: user_id=%s", u.id)
    return ok(message="Password changed successfully.")
