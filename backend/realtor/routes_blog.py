from __future__ import annotations

import datetime as dt
import json
import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from realtor.auth import Admin, Caller
from realtor.db import get_db
from realtor.errors import NotFound
from realtor.models import BlogPost
from realtor.moderation import APPROVED, BLOG_POST_POLICY, log_moderation, moderate
from realtor.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, paginate
from realtor.schemas import ApprovalStatusIn, BlogPostIn, BlogPostUpdateIn
from realtor.serializers import blog_post_out, ok, split_tags

logger = logging.getLogger(__name__)

router = APIRouter(tags=["blog"])

DbSession = Annotated[Session, Depends(get_db)]


def _slugify(s: str) -> str:
    s = (s or "").strip().lower()
    s = re.sub(r"[^a-z0-9]+", "-", s)
    s = re.sub(r"-+", "-", s).strip("-")
    return s or "post"


def unique_slug(db: Session, title: str) -> str:
    """
    `<slugified-title>-<epoch millis>`, bumped until no other post has it.
    """
    base = _slugify(title)
    stamp = int(dt.datetime.now(dt.timezone.utc).timestamp() * 1000)
    while True:
        slug = f"{base}-{stamp}"
        taken = db.execute(select(BlogPost.id).where(BlogPost.slug == slug)).scalar_one_or_none()
        if not taken:
            return slug
        stamp += 1


def _get_post(db: Session, post_id: int) -> BlogPost:
    b = db.get(BlogPost, int(post_id))
    if not b:
        raise NotFound("Blog post not found")
    return b


def _public_posts():
    return select(BlogPost).where(BlogPost.status == "published", BlogPost.approval_status == APPROVED)


@router.get("/blog/posts")
def list_blog_posts(db: DbSession, categories: list[str] = Query(default=[], alias="category")):
    stmt = _public_posts().order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
    wanted = [c.strip() for c in categories if c and c.strip()]
    if wanted:
        stmt = stmt.where(BlogPost.category.in_(wanted))
    rows = db.execute(stmt).unique().scalars().all()
    return ok([blog_post_out(b) for b in rows])


@router.post("/blog/posts", status_code=201)
def create_blog_post(data: BlogPostIn, caller: Caller, db: DbSession):
    b = BlogPost(
        submitted_by_id=caller.user_id,
        title=data.title.strip(),
        slug=unique_slug(db, data.title),
        excerpt=data.excerpt.strip(),
        content=data.content.strip(),
        image_url=str(data.image_url),
        author=(data.author or "").strip() or caller.name or "Anonymous",
        status=data.status,
        category=data.category,
        tags_json=json.dumps(split_tags(data.tags)),
        approval_status=BLOG_POST_POLICY.initial_state(caller.role),
    )
    db.add(b)
    db.flush()
    db.refresh(b)
    log_moderation(db, actor_user_id=caller.user_id, entity_type="blog_post", entity_id=b.id, action="create")
    logger.info("Blog post created: id=%s slug=%s approval=%s", b.id, b.slug, b.approval_status)
    return ok(blog_post_out(b, include_internal=True), message="Blog post submitted successfully.")


@router.get("/blog/my-posts")
def my_blog_posts(caller: Caller, db: DbSession):
    stmt = (
        select(BlogPost)
        .where(BlogPost.submitted_by_id == caller.user_id)
        .order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
    )
    rows = db.execute(stmt).unique().scalars().all()
    return ok([blog_post_out(b, include_internal=True) for b in rows])


@router.get("/blog/posts/{slug}")
def get_blog_post(slug: str, db: DbSession):
    b = db.execute(_public_posts().where(BlogPost.slug == slug)).unique().scalar_one_or_none()
    if not b:
        raise NotFound("Blog post not found or is not published")
    return ok(blog_post_out(b))


# -----------------------
# Admin
# -----------------------
@router.get("/admin/blog/posts")
def admin_list_blog_posts(
    caller: Admin,
    db: DbSession,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    approval_status: str | None = Query(default=None, alias="approvalStatus"),
    status: str | None = Query(default=None),
):
    stmt = select(BlogPost).order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
    if approval_status:
        stmt = stmt.where(BlogPost.approval_status == approval_status.strip())
    if status:
        stmt = stmt.where(BlogPost.status == status.strip())
    pg = paginate(db, stmt, page=page, limit=limit)
    return ok([blog_post_out(b, include_internal=True) for b in pg.items], pagination=pg.meta())


@router.get("/admin/blog/posts/{post_id}")
def admin_get_blog_post(post_id: int, caller: Admin, db: DbSession):
    return ok(blog_post_out(_get_post(db, post_id), include_internal=True))


@router.put("/admin/blog/posts/{post_id}")
def admin_update_blog_post(post_id: int, data: BlogPostUpdateIn, caller: Admin, db: DbSession):
    """
    Edit a post's content. The slug is kept so published links stay valid.
    """
    b = _get_post(db, post_id)
    changes = data.model_dump(exclude_unset=True)
    for key in ("title", "excerpt", "content", "author"):
        value = changes.get(key)
        if value:
            setattr(b, key, value.strip())
    if data.image_url:
        b.image_url = str(data.image_url)
    if data.category:
        b.category = data.category
    if data.status:
        b.status = data.status
    if "tags" in changes:
        b.tags_json = json.dumps(split_tags(data.tags))
    db.add(b)
    db.flush()
    db.refresh(b)
    return ok(blog_post_out(b, include_internal=True), message="Blog post updated successfully.")


@router.delete("/admin/blog/posts/{post_id}")
def admin_delete_blog_post(post_id: int, caller: Admin, db: DbSession):
    b = _get_post(db, post_id)
    db.delete(b)
    log_moderation(db, actor_user_id=caller.user_id, entity_type="blog_post", entity_id=int(post_id), action="delete")
    return ok(message="Blog post deleted successfully.")


@router.patch("/admin/blog/posts/{post_id}")
def admin_moderate_blog_post(post_id: int, data: ApprovalStatusIn, caller: Admin, db: DbSession):
    b = _get_post(db, post_id)
    moderate(db, BLOG_POST_POLICY, b, data.approval_status, actor_user_id=caller.user_id)
    db.flush()
    return ok(blog_post_out(b, include_internal=True), message=f"Blog post status updated to {data.approval_status}.")
