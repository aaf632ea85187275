from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from realtor.auth import Admin
from realtor.db import get_db
from realtor.errors import Forbidden, NotFound
from realtor.models import ROLES, ModerationLog, User
from realtor.moderation import log_moderation
from realtor.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, paginate
from realtor.routes_properties import property_counts_by_submitter
from realtor.schemas import RoleUpdateIn
from realtor.serializers import agent_out, moderation_log_out, ok, user_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])

DbSession = Annotated[Session, Depends(get_db)]


# -----------------------
# Agents (public)
# -----------------------
@router.get("/agents")
def list_agents(db: DbSession):
    stmt = select(User).where(User.role == "agent").order_by(User.name.asc(), User.id.asc())
    return ok([agent_out(u) for u in db.execute(stmt).scalars().all()])


@router.get("/agents/{agent_id}")
def get_agent(agent_id: int, db: DbSession):
    u = db.get(User, int(agent_id))
    if not u or u.role != "agent":
        raise NotFound("Agent not found")
    return ok(agent_out(u))


# -----------------------
# Admin
# -----------------------
@router.get("/admin/users")
def admin_list_users(
    caller: Admin,
    db: DbSession,
    search: str | None = Query(default=None),
    role: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
):
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    qq = (search or "").strip().lower()
    if qq:
        stmt = stmt.where((func.lower(User.name).contains(qq, autoescape=True)) | (func.lower(User.email).contains(qq, autoescape=True)))
    rr = (role or "").strip().lower()
    if rr in ROLES:
        stmt = stmt.where(User.role == rr)

    pg = paginate(db, stmt, page=page, limit=limit)
    counts = property_counts_by_submitter(db, [int(u.id) for u in pg.items])
    items = []
    for u in pg.items:
        out = user_out(u)
        out["isProtected"] = bool(u.is_protected)
        out["totalProperties"] = int(counts.get(int(u.id), 0))
        items.append(out)
    return ok(items, pagination=pg.meta())


@router.patch("/admin/users/{user_id}/role")
def admin_update_user_role(user_id: int, data: RoleUpdateIn, caller: Admin, db: DbSession):
    u = db.get(User, int(user_id))
    if not u:
        raise NotFound("User not found")
    if u.is_protected and data.role != "admin":
        raise Forbidden("Cannot change the primary admin's role.")
    previous = u.role
    u.role = data.role
    db.add(u)
    log_moderation(
        db,
        actor_user_id=caller.user_id,
        entity_type="user",
        entity_id=u.id,
        action="role",
        reason=f"{previous} -> {data.role}",
    )
    logger.info("Role change: user_id=%s %s -> %s by user_id=%s", u.id, previous, data.role, caller.user_id)
    db.flush()
    return ok(user_out(u), message="User role updated successfully.")


@router.get("/admin/logs")
def admin_logs(
    caller: Admin,
    db: DbSession,
    entity_type: str | None = Query(default=None, alias="entityType"),
    entity_id: int | None = Query(default=None, alias="entityId"),
    limit: int = Query(default=200, ge=1, le=1000),
):
    stmt = select(ModerationLog).order_by(ModerationLog.id.desc())
    if entity_type:
        stmt = stmt.where(ModerationLog.entity_type == entity_type)
    if entity_id is not None:
        stmt = stmt.where(ModerationLog.entity_id == int(entity_id))
    logs = db.execute(stmt.limit(int(limit))).scalars().all()
    return ok([moderation_log_out(l) for l in logs])
