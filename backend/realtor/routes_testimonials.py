from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from realtor.auth import Admin
from realtor.db import get_db
from realtor.errors import NotFound
from realtor.models import Testimonial
from realtor.moderation import log_moderation
from realtor.schemas import TestimonialIn
from realtor.serializers import ok, testimonial_out

router = APIRouter(tags=["testimonials"])

DbSession = Annotated[Session, Depends(get_db)]

DEFAULT_TESTIMONIAL_IMAGE = "https://placehold.co/80x80.png"


def _all(db: Session) -> list[Testimonial]:
    stmt = select(Testimonial).order_by(Testimonial.created_at.desc(), Testimonial.id.desc())
    return list(db.execute(stmt).scalars().all())


@router.get("/testimonials")
def list_testimonials(db: DbSession):
    return ok([testimonial_out(t) for t in _all(db)])


@router.get("/admin/testimonials")
def admin_list_testimonials(caller: Admin, db: DbSession):
    return ok([testimonial_out(t) for t in _all(db)])


@router.post("/admin/testimonials", status_code=201)
def admin_create_testimonial(data: TestimonialIn, caller: Admin, db: DbSession):
    t = Testimonial(
        name=data.name.strip(),
        role=data.role.strip(),
        quote=data.quote.strip(),
        rating=float(data.rating),
        image_url=str(data.image_url) if data.image_url else DEFAULT_TESTIMONIAL_IMAGE,
        success_tag=(data.success_tag or "").strip(),
    )
    db.add(t)
    db.flush()
    db.refresh(t)
    log_moderation(db, actor_user_id=caller.user_id, entity_type="testimonial", entity_id=t.id, action="create")
    return ok(testimonial_out(t), message="Testimonial added successfully.")


@router.delete("/admin/testimonials/{testimonial_id}")
def admin_delete_testimonial(testimonial_id: int, caller: Admin, db: DbSession):
    t = db.get(Testimonial, int(testimonial_id))
    if not t:
        raise NotFound("Testimonial not found")
    db.delete(t)
    log_moderation(
        db, actor_user_id=caller.user_id, entity_type="testimonial", entity_id=int(testimonial_id), action="delete"
    )
    return ok(message="Testimonial deleted successfully.")
