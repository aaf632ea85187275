"""
Caller identity and the role-based access gate.

The bearer token is verified once per request and only names the account;
role, name and email are read from the current `users` row, so a role change
or a deleted account takes effect on the next request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated, Callable

import jwt
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from realtor.db import get_db
from realtor.errors import Forbidden, Unauthenticated
from realtor.models import User
from realtor.security import decode_access_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    user_id: int
    email: str
    name: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def owns(self, owner_id: int | None) -> bool:
        return owner_id is not None and int(owner_id) == self.user_id

    @classmethod
    def from_user(cls, u: User) -> "CallerIdentity":
        return cls(user_id=int(u.id), email=u.email or "", name=u.name or "", role=u.role or "user")


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    if not authorization.lower().startswith("bearer "):
        return None
    return authorization.split(" ", 1)[1].strip() or None


def _user_id_from_claims(payload: dict) -> int:
    try:
        return int(payload.get("sub") or 0)
    except (TypeError, ValueError):
        return 0


def get_optional_caller(
    db: Annotated[Session, Depends(get_db)],
    authorization: Annotated[str | None, Header()] = None,
) -> CallerIdentity | None:
    """
    Identity for endpoints that are public but widen their view for owners/admins.
    A missing or invalid token, or a deleted account, means an anonymous caller.
    """
    token = _bearer_token(authorization)
    if not token:
        return None
    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError:
        return None
    user_id = _user_id_from_claims(payload)
    if not user_id:
        return None
    u = db.get(User, user_id)
    return CallerIdentity.from_user(u) if u else None


def require_caller(
    db: Annotated[Session, Depends(get_db)],
    authorization: Annotated[str | None, Header()] = None,
) -> CallerIdentity:
    token = _bearer_token(authorization)
    if not token:
        raise Unauthenticated("Unauthorized: Authentication required.")
    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise Unauthenticated("Unauthorized: Token expired.")
    except jwt.InvalidTokenError:
        raise Unauthenticated("Unauthorized: Invalid token.")
    user_id = _user_id_from_claims(payload)
    if not user_id:
        raise Unauthenticated("Unauthorized: Invalid token payload.")
    u = db.get(User, user_id)
    if not u:
        raise Unauthenticated("Unauthorized: User not found.")
    return CallerIdentity.from_user(u)


def require_roles(*roles: str, detail: str | None = None) -> Callable[..., CallerIdentity]:
    """
    Dependency factory: authenticated caller whose current role is in `roles`.

    Usage:
        @router.get("/admin/things")
        def things(caller: Annotated[CallerIdentity, Depends(require_roles("admin"))]):
            ...
    """
    allowed = frozenset(roles)

    def _check(caller: Annotated[CallerIdentity, Depends(require_caller)]) -> CallerIdentity:
        if caller.role not in allowed:
            logger.info("Role denied: user_id=%s role=%s allowed=%s", caller.user_id, caller.role, sorted(allowed))
            if detail:
                raise Forbidden(detail)
            if allowed == {"admin"}:
                raise Forbidden()
            raise Forbidden("Forbidden: Insufficient role")
        return caller

    return _check


require_admin = require_roles("admin")

OptionalCaller = Annotated[CallerIdentity | None, Depends(get_optional_caller)]
Caller = Annotated[CallerIdentity, Depends(require_caller)]
Admin = Annotated[CallerIdentity, Depends(require_admin)]
