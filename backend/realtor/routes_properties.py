from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select, update as sa_update
from sqlalchemy.orm import Session

from realtor.auth import Admin, Caller, CallerIdentity, OptionalCaller
from realtor.db import get_db
from realtor.errors import Forbidden, NotFound
from realtor.models import PROPERTY_STATUSES, Property
from realtor.moderation import APPROVED, PENDING, PROPERTY_POLICY, REJECTED, log_moderation, moderate
from realtor.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, paginate
from realtor.schemas import ApprovalStatusIn, PropertyIn, PropertyUpdateIn
from realtor.serializers import dump_list, ok, property_out

logger = logging.getLogger(__name__)

router = APIRouter(tags=["properties"])

DbSession = Annotated[Session, Depends(get_db)]

# Listing statuses an anonymous visitor may filter on.
PUBLIC_STATUSES = ("For Sale", "For Rent")


def _get_property(db: Session, property_id: int) -> Property:
    p = db.get(Property, int(property_id))
    if not p:
        raise NotFound("Property not found")
    return p


def _can_manage(caller: CallerIdentity | None, p: Property) -> bool:
    return caller is not None and (caller.is_admin or caller.owns(p.submitted_by_id))


@router.get("/properties")
def list_properties(
    db: DbSession,
    caller: OptionalCaller,
    status: str | None = Query(default=None),
    submitted_by_id: int | None = Query(default=None, alias="submittedById"),
):
    """
    Public listing of approved properties.

    Admins see every property and may filter by any listing status and by
    submitter; everyone else only sees `Approved` listings, optionally
    narrowed to `For Sale` / `For Rent`.
    """
    stmt = select(Property).order_by(Property.created_at.desc(), Property.id.desc())
    st = (status or "").strip()
    is_admin = caller is not None and caller.is_admin

    if is_admin:
        if st in PROPERTY_STATUSES:
            stmt = stmt.where(Property.status == st)
        if submitted_by_id is not None:
            stmt = stmt.where(Property.submitted_by_id == int(submitted_by_id))
    else:
        stmt = stmt.where(Property.approval_status == APPROVED)
        if st:
            if st not in PUBLIC_STATUSES:
                return ok([])
            stmt = stmt.where(Property.status == st)

    rows = db.execute(stmt).unique().scalars().all()
    return ok([property_out(p, include_internal=is_admin) for p in rows])


@router.post("/properties", status_code=201)
def create_property(data: PropertyIn, caller: Caller, db: DbSession):
    p = Property(
        submitted_by_id=caller.user_id,
        address=data.address.strip(),
        city=data.city.strip(),
        state=data.state.strip(),
        zip=data.zip,
        price=float(data.price),
        bedrooms=int(data.bedrooms),
        bathrooms=float(data.bathrooms),
        area_sq_ft=float(data.area_sq_ft),
        description=data.description.strip(),
        images_json=dump_list(data.images),
        property_type=data.property_type,
        year_built=data.year_built,
        features_json=dump_list(data.features),
        latitude=data.latitude,
        longitude=data.longitude,
        status=data.status,
        is_verified=False,
        approval_status=PROPERTY_POLICY.initial_state(caller.role),
        views=0,
    )
    db.add(p)
    db.flush()
    db.refresh(p)
    log_moderation(db, actor_user_id=caller.user_id, entity_type="property", entity_id=p.id, action="create")
    logger.info("Property created: id=%s by user_id=%s approval=%s", p.id, caller.user_id, p.approval_status)
    return ok(property_out(p, include_internal=True), message="Property submitted successfully.")


@router.get("/properties/{property_id}")
def get_property(property_id: int, db: DbSession, caller: OptionalCaller):
    p = _get_property(db, property_id)
    manage = _can_manage(caller, p)
    if not manage and p.approval_status != APPROVED:
        raise Forbidden("Forbidden: You do not have access to this property or it is not approved.")
    return ok(property_out(p, include_internal=manage))


@router.put("/properties/{property_id}")
def update_property(property_id: int, data: PropertyUpdateIn, caller: Caller, db: DbSession):
    """
    Owner can edit their own listing. Admin can edit any listing.
    """
    p = _get_property(db, property_id)
    if not _can_manage(caller, p):
        raise Forbidden("Forbidden: You do not have permission to update this property.")

    changes: dict[str, Any] = data.model_dump(exclude_unset=True)
    for key in ("images", "features"):
        if key in changes:
            if changes[key] is None:
                changes.pop(key)
                continue
            setattr(p, f"{key}_json", dump_list(getattr(data, key)))
            changes.pop(key)
    for key, value in changes.items():
        # Required columns keep their value when a field is explicitly nulled.
        if value is None and key not in {"year_built", "latitude", "longitude"}:
            continue
        setattr(p, key, value.strip() if isinstance(value, str) else value)

    # An owner editing a rejected listing resubmits it for review.
    if p.approval_status == REJECTED and not caller.is_admin:
        p.approval_status = PENDING
        log_moderation(db, actor_user_id=caller.user_id, entity_type="property", entity_id=p.id, action="resubmit")
    if p.approval_status == REJECTED:
        p.status = "Draft"

    db.add(p)
    db.flush()
    db.refresh(p)
    return ok(property_out(p, include_internal=True), message="Property updated successfully.")


@router.delete("/properties/{property_id}")
def delete_property(property_id: int, caller: Admin, db: DbSession):
    p = _get_property(db, property_id)
    db.delete(p)
    log_moderation(db, actor_user_id=caller.user_id, entity_type="property", entity_id=int(property_id), action="delete")
    logger.info("Property deleted: id=%s by user_id=%s", property_id, caller.user_id)
    return ok(message="Property deleted successfully.")


@router.patch("/properties/{property_id}/update-status")
def update_property_status(property_id: int, data: ApprovalStatusIn, caller: Admin, db: DbSession):
    p = _get_property(db, property_id)
    moderate(db, PROPERTY_POLICY, p, data.approval_status, actor_user_id=caller.user_id)
    db.flush()
    return ok(property_out(p, include_internal=True), message=f"Property status updated to {data.approval_status}.")


@router.patch("/properties/{property_id}/increment-view")
def increment_property_view(property_id: int, db: DbSession):
    # Single UPDATE so concurrent views never lose an increment.
    res = db.execute(
        sa_update(Property)
        .where(Property.id == int(property_id))
        .values(views=Property.views + 1)
        .returning(Property.views)
        .execution_options(synchronize_session=False)
    ).first()
    if res is None:
        raise NotFound("Property not found")
    return ok({"id": int(property_id), "views": int(res[0])})


@router.get("/my-properties")
def my_properties(
    caller: Caller,
    db: DbSession,
    property_type: str | None = Query(default=None, alias="type"),
):
    stmt = (
        select(Property)
        .where(Property.submitted_by_id == caller.user_id)
        .order_by(Property.created_at.desc(), Property.id.desc())
    )
    if property_type:
        stmt = stmt.where(Property.property_type == property_type.strip())
    rows = db.execute(stmt).unique().scalars().all()
    return ok([property_out(p, include_internal=True) for p in rows])


@router.get("/admin/properties")
def admin_list_properties(
    caller: Admin,
    db: DbSession,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    approval_status: str | None = Query(default=None, alias="approvalStatus"),
    status: str | None = Query(default=None),
    search: str | None = Query(default=None),
):
    """
    Admin-only moderation queue: every listing, newest first, paginated.
    """
    stmt = select(Property).order_by(Property.created_at.desc(), Property.id.desc())
    if approval_status:
        stmt = stmt.where(Property.approval_status == approval_status.strip())
    if status:
        stmt = stmt.where(Property.status == status.strip())
    qq = (search or "").strip().lower()
    if qq:
        stmt = stmt.where(
            (func.lower(Property.address).contains(qq, autoescape=True))
            | (func.lower(Property.city).contains(qq, autoescape=True))
            | (func.lower(Property.state).contains(qq, autoescape=True))
        )
    pg = paginate(db, stmt, page=page, limit=limit)
    return ok([property_out(p, include_internal=True) for p in pg.items], pagination=pg.meta())


def property_counts_by_submitter(db: Session, user_ids: list[int]) -> dict[int, int]:
    if not user_ids:
        return {}
    rows = db.execute(
        select(Property.submitted_by_id, func.count(Property.id))
        .where(Property.submitted_by_id.in_(user_ids))
        .group_by(Property.submitted_by_id)
    ).all()
    return {int(uid): int(cnt or 0) for uid, cnt in rows}
