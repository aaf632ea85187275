from __future__ import annotations

import json
from typing import Any

from realtor.models import BlogPost, ModerationLog, Project, Property, Testimonial, User


def ok(data: Any = None, *, message: str | None = None, **extra: Any) -> dict[str, Any]:
    out: dict[str, Any] = {"success": True}
    if data is not None:
        out["data"] = data
    if message:
        out["message"] = message
    out.update(extra)
    return out


def _iso(v) -> str:
    return v.isoformat() if v is not None else ""


def _json_list(raw: str | None) -> list[Any]:
    try:
        v = json.loads(raw or "[]")
    except ValueError:
        return []
    return v if isinstance(v, list) else []


def dump_list(items) -> str:
    return json.dumps([str(x) for x in (items or [])])


def split_tags(tags: str | list[str] | None) -> list[str]:
    if tags is None:
        return []
    parts = tags.split(",") if isinstance(tags, str) else tags
    return [t.strip() for t in parts if t and t.strip()]


def _submitter_out(u: User | None, *, include_internal: bool) -> dict[str, Any] | None:
    # Owner may have been deleted; references are weak.
    if u is None:
        return None
    out: dict[str, Any] = {"id": u.id, "name": u.name}
    if include_internal:
        out["email"] = u.email
    return out


def user_out(u: User) -> dict[str, Any]:
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "phone": u.phone or "",
        "specialty": u.specialty or "",
        "profilePictureUrl": u.profile_picture_url or "",
        "isEmailVerified": bool(u.is_email_verified),
        "createdAt": _iso(u.created_at),
        "updatedAt": _iso(u.updated_at),
    }


def agent_out(u: User) -> dict[str, Any]:
    """Public agent card: contact details an agent chose to publish, nothing else."""
    return {
        "id": u.id,
        "name": u.name,
        "email": u.email,
        "phone": u.phone or "",
        "specialty": u.specialty or "",
        "profilePictureUrl": u.profile_picture_url or "",
        "createdAt": _iso(u.created_at),
    }


def property_out(p: Property, *, include_internal: bool = False) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": p.id,
        "address": p.address,
        "city": p.city,
        "state": p.state,
        "zip": p.zip,
        "price": p.price,
        "bedrooms": p.bedrooms,
        "bathrooms": p.bathrooms,
        "areaSqFt": p.area_sq_ft,
        "description": p.description,
        "images": _json_list(p.images_json),
        "propertyType": p.property_type,
        "yearBuilt": p.year_built,
        "features": _json_list(p.features_json),
        "latitude": p.latitude,
        "longitude": p.longitude,
        "status": p.status,
        "isVerified": bool(p.is_verified),
        "approvalStatus": p.approval_status,
        "views": int(p.views or 0),
        "submittedBy": _submitter_out(p.submitted_by, include_internal=include_internal),
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }
    return out


def project_out(p: Project, *, include_internal: bool = False) -> dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "location": p.location,
        "developer": p.developer,
        "imageUrl": p.image_url,
        "description": p.description or "",
        "keyHighlights": _json_list(p.key_highlights_json),
        "amenities": _json_list(p.amenities_json),
        "isVerified": bool(p.is_verified),
        "status": p.status,
        "timeline": p.timeline or "",
        "learnMoreLink": p.learn_more_link or "",
        "approvalStatus": p.approval_status,
        "submittedBy": _submitter_out(p.submitted_by, include_internal=include_internal),
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }


def blog_post_out(b: BlogPost, *, include_internal: bool = False) -> dict[str, Any]:
    return {
        "id": b.id,
        "title": b.title,
        "slug": b.slug,
        "excerpt": b.excerpt,
        "content": b.content,
        "imageUrl": b.image_url,
        "author": b.author,
        "status": b.status,
        "category": b.category,
        "tags": _json_list(b.tags_json),
        "approvalStatus": b.approval_status,
        "submittedBy": _submitter_out(b.submitted_by, include_internal=include_internal),
        "createdAt": _iso(b.created_at),
        "updatedAt": _iso(b.updated_at),
    }


def testimonial_out(t: Testimonial) -> dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "role": t.role,
        "quote": t.quote,
        "imageUrl": t.image_url,
        "rating": t.rating,
        "successTag": t.success_tag or "",
        "createdAt": _iso(t.created_at),
    }


def moderation_log_out(l: ModerationLog) -> dict[str, Any]:
    return {
        "id": l.id,
        "actorUserId": l.actor_user_id,
        "entityType": l.entity_type,
        "entityId": l.entity_id,
        "action": l.action,
        "reason": l.reason,
        "createdAt": _iso(l.created_at),
    }
