from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.trustedhost import TrustedHostMiddleware

from realtor import routes_auth, routes_blog, routes_projects, routes_properties, routes_testimonials, routes_users
from realtor.config import (
    allowed_hosts,
    cors_origins,
    enforce_secure_secrets,
    is_local_dev,
    primary_admin_email,
    primary_admin_password,
)
from realtor.db import init_db, session_scope
from realtor.errors import ValidationFailed, public_message_for
from realtor.models import User
from realtor.security import hash_password

logger = logging.getLogger(__name__)

app = FastAPI(title="Albatross Realtor API")

# Production hardening: ensure we don't run with dangerous defaults.
enforce_secure_secrets()

# Optional host protection (recommend configuring ALLOWED_HOSTS in prod).
app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts())


@app.middleware("http")
async def _security_headers(request, call_next):
    resp = await call_next(request)
    resp.headers.setdefault("X-Content-Type-Options", "nosniff")
    resp.headers.setdefault("X-Frame-Options", "DENY")
    resp.headers.setdefault("Referrer-Policy", "no-referrer")
    resp.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    return resp


app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------------
# Error envelope
# -----------------------
def _error_response(status_code: int, error: str, details: Any = None, headers: dict | None = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "error": error}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    return _error_response(
        exc.status_code,
        str(exc.detail),
        getattr(exc, "details", None),
        headers=getattr(exc, "headers", None),
    )


def _field_errors(errors: list[dict]) -> dict[str, list[str]]:
    """
    Pydantic error list -> `{"field": ["message", ...]}` keyed by wire name.
    """
    out: dict[str, list[str]] = {}
    for e in errors:
        loc = [str(x) for x in (e.get("loc") or ())]
        if loc and loc[0] in {"body", "query", "path", "header"} and len(loc) > 1:
            loc = loc[1:]
        key = ".".join(loc) or "body"
        msg = str(e.get("msg") or "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, ") :]
        out.setdefault(key, []).append(msg)
    return out


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    return _error_response(400, ValidationFailed.message, _field_errors(list(exc.errors())))


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_response(500, public_message_for(exc))


for _r in (
    routes_auth.router,
    routes_properties.router,
    routes_projects.router,
    routes_blog.router,
    routes_testimonials.router,
    routes_users.router,
):
    app.include_router(_r)


@app.on_event("startup")
def seed_primary_admin() -> None:
    """
    Local runs get their tables created on the fly; every run makes sure the
    configured primary admin exists, is an admin, and is protected.
    """
    if is_local_dev():
        init_db()
    email = primary_admin_email()
    password = primary_admin_password()
    if not email:
        return
    try:
        with session_scope() as db:
            admin = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
            if admin:
                admin.role = "admin"
                admin.is_protected = True
                db.add(admin)
                return
            if not password:
                logger.warning("PRIMARY_ADMIN_EMAIL is set but PRIMARY_ADMIN_PASSWORD is empty; not seeding %s", email)
                return
            db.add(
                User(
                    email=email,
                    name="Administrator",
                    role="admin",
                    password_hash=hash_password(password),
                    is_email_verified=True,
                    is_protected=True,
                )
            )
            logger.info("Seeded primary admin %s", email)
    except SQLAlchemyError:
        # If the DB isn't migrated yet, seed on a later start.
        logger.warning("Primary admin seed skipped: database not ready", exc_info=True)


@app.get("/health")
def health():
    return {"ok": True}
