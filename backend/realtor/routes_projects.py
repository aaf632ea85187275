"""
New developments ("projects"). Created and managed by admins; the public
only ever sees approved ones.
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from realtor.auth import Admin
from realtor.db import get_db
from realtor.errors import NotFound
from realtor.models import PROJECT_STATUSES, Project
from realtor.moderation import APPROVED, PROJECT_POLICY, log_moderation, moderate
from realtor.schemas import ApprovalStatusIn, ProjectIn, ProjectUpdateIn
from realtor.serializers import dump_list, ok, project_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["projects"])

DbSession = Annotated[Session, Depends(get_db)]

DEFAULT_PROJECT_IMAGE = "https://placehold.co/600x400.png"


def _get_project(db: Session, project_id: int) -> Project:
    p = db.get(Project, int(project_id))
    if not p:
        raise NotFound("Project not found")
    return p


@router.get("/projects")
def list_projects(db: DbSession, status: str | None = Query(default=None)):
    stmt = (
        select(Project)
        .where(Project.approval_status == APPROVED)
        .order_by(Project.created_at.desc(), Project.id.desc())
    )
    st = (status or "").strip()
    if st:
        if st not in PROJECT_STATUSES:
            return ok([])
        stmt = stmt.where(Project.status == st)
    rows = db.execute(stmt).unique().scalars().all()
    return ok([project_out(p) for p in rows])


@router.get("/admin/developments")
def admin_list_projects(
    caller: Admin,
    db: DbSession,
    approval_status: str | None = Query(default=None, alias="approvalStatus"),
):
    stmt = select(Project).order_by(Project.created_at.desc(), Project.id.desc())
    if approval_status:
        stmt = stmt.where(Project.approval_status == approval_status.strip())
    rows = db.execute(stmt).unique().scalars().all()
    return ok([project_out(p, include_internal=True) for p in rows])


@router.post("/admin/developments", status_code=201)
def admin_create_project(data: ProjectIn, caller: Admin, db: DbSession):
    p = Project(
        submitted_by_id=caller.user_id,
        name=data.name.strip(),
        location=data.location.strip(),
        developer=data.developer.strip(),
        image_url=str(data.image_url) if data.image_url else DEFAULT_PROJECT_IMAGE,
        description=(data.description or "").strip(),
        key_highlights_json=dump_list(data.key_highlights),
        amenities_json=dump_list(data.amenities),
        is_verified=bool(data.is_verified),
        status=data.status,
        timeline=(data.timeline or "").strip(),
        learn_more_link=str(data.learn_more_link) if data.learn_more_link else "",
        approval_status=PROJECT_POLICY.initial_state(caller.role),
    )
    db.add(p)
    db.flush()
    db.refresh(p)
    log_moderation(db, actor_user_id=caller.user_id, entity_type="project", entity_id=p.id, action="create")
    logger.info("Project created: id=%s by user_id=%s", p.id, caller.user_id)
    return ok(project_out(p, include_internal=True), message="Project created successfully.")


@router.get("/admin/developments/{project_id}")
def admin_get_project(project_id: int, caller: Admin, db: DbSession):
    return ok(project_out(_get_project(db, project_id), include_internal=True))


@router.put("/admin/developments/{project_id}")
def admin_update_project(project_id: int, data: ProjectUpdateIn, caller: Admin, db: DbSession):
    p = _get_project(db, project_id)
    changes = data.model_dump(exclude_unset=True)
    if "name" in changes and data.name:
        p.name = data.name.strip()
    if "location" in changes and data.location:
        p.location = data.location.strip()
    if "developer" in changes and data.developer:
        p.developer = data.developer.strip()
    if "image_url" in changes and data.image_url:
        p.image_url = str(data.image_url)
    if "description" in changes:
        p.description = (data.description or "").strip()
    if "key_highlights" in changes and data.key_highlights:
        p.key_highlights_json = dump_list(data.key_highlights)
    if "amenities" in changes:
        p.amenities_json = dump_list(data.amenities)
    if "is_verified" in changes and data.is_verified is not None:
        p.is_verified = bool(data.is_verified)
    if "status" in changes:
        p.status = data.status
    if "timeline" in changes:
        p.timeline = (data.timeline or "").strip()
    if "learn_more_link" in changes:
        p.learn_more_link = str(data.learn_more_link) if data.learn_more_link else ""
    db.add(p)
    db.flush()
    db.refresh(p)
    return ok(project_out(p, include_internal=True), message="Project updated successfully.")


@router.delete("/admin/developments/{project_id}")
def admin_delete_project(project_id: int, caller: Admin, db: DbSession):
    p = _get_project(db, project_id)
    db.delete(p)
    log_moderation(db, actor_user_id=caller.user_id, entity_type="project", entity_id=int(project_id), action="delete")
    return ok(message="Project deleted successfully.")


@router.patch("/admin/developments/{project_id}/update-status")
def admin_update_project_status(project_id: int, data: ApprovalStatusIn, caller: Admin, db: DbSession):
    p = _get_project(db, project_id)
    moderate(db, PROJECT_POLICY, p, data.approval_status, actor_user_id=caller.user_id)
    db.flush()
    return ok(project_out(p, include_internal=True), message=f"Project status updated to {data.approval_status}.")
