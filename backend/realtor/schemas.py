"""
Request bodies.

Field names are snake_case in Python and camelCase on the wire
(`areaSqFt`, `keyHighlights`, `approvalStatus`, ...).
"""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from realtor.models import (
    APPROVAL_STATUSES,
    BLOG_CATEGORIES,
    BLOG_STATUSES,
    PROJECT_STATUSES,
    PROPERTY_STATUSES,
    PROPERTY_TYPES,
    ROLES,
)

ZIP_PATTERN = r"^\d{5}(-\d{4})?$"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)


def _drop_blank_items(v):
    if isinstance(v, list):
        return [x for x in v if not (isinstance(x, str) and not x.strip())]
    return v


def _check_year_built(v: int | None) -> int | None:
    if v is None:
        return v
    latest = dt.date.today().year + 5
    if not (1800 <= v <= latest):
        raise ValueError(f"Year built must be between 1800 and {latest} or empty.")
    return v


# -----------------------
# Auth / profile
# -----------------------
class LoginIn(ApiModel):
    email: EmailStr
    password: str = Field(min_length=1)


class SignupIn(ApiModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["user", "agent"] = "user"
    phone: str | None = Field(default=None, validate_default=True)

    @field_validator("phone")
    @classmethod
    def _agents_need_phone(cls, v: str | None, info: ValidationInfo) -> str | None:
        if info.data.get("role") == "agent" and not (v or "").strip():
            raise ValueError("Phone number is required for agents.")
        return v


class ForgotPasswordIn(ApiModel):
    email: EmailStr


class ResetPasswordIn(ApiModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=6)


class ProfileUpdateIn(ApiModel):
    name: str | None = Field(default=None, min_length=2)
    profile_picture_url: str | None = None
    phone: str | None = None
    specialty: str | None = None


class ChangePasswordIn(ApiModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)


class RoleUpdateIn(ApiModel):
    role: Literal[ROLES]  # type: ignore[valid-type]


class ApprovalStatusIn(ApiModel):
    approval_status: Literal[APPROVAL_STATUSES]  # type: ignore[valid-type]


# -----------------------
# Properties
# -----------------------
class PropertyIn(ApiModel):
    address: str = Field(min_length=5)
    city: str = Field(min_length=2)
    state: str = Field(min_length=2)
    zip: str = Field(pattern=ZIP_PATTERN)
    price: float = Field(gt=0)
    bedrooms: int = Field(ge=0)
    bathrooms: float = Field(ge=0)
    area_sq_ft: float = Field(gt=0)
    description: str = Field(min_length=20)
    property_type: Literal[PROPERTY_TYPES]  # type: ignore[valid-type]
    status: Literal[PROPERTY_STATUSES] = "Pending Approval"  # type: ignore[valid-type]
    year_built: int | None = None
    images: list[HttpUrl] = Field(min_length=1)
    features: list[str] = Field(default_factory=list)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    drop_blank_items = field_validator("images", "features", mode="before")(_drop_blank_items)
    check_year_built = field_validator("year_built")(_check_year_built)


class PropertyUpdateIn(ApiModel):
    """
    Partial update for owner/admin editing an existing property.
    Only provided fields are updated; approval status has its own endpoint.
    """

    address: str | None = Field(default=None, min_length=5)
    city: str | None = Field(default=None, min_length=2)
    state: str | None = Field(default=None, min_length=2)
    zip: str | None = Field(default=None, pattern=ZIP_PATTERN)
    price: float | None = Field(default=None, gt=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: float | None = Field(default=None, ge=0)
    area_sq_ft: float | None = Field(default=None, gt=0)
    description: str | None = Field(default=None, min_length=20)
    property_type: Literal[PROPERTY_TYPES] | None = None  # type: ignore[valid-type]
    status: Literal[PROPERTY_STATUSES] | None = None  # type: ignore[valid-type]
    year_built: int | None = None
    images: list[HttpUrl] | None = Field(default=None, min_length=1)
    features: list[str] | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    drop_blank_items = field_validator("images", "features", mode="before")(_drop_blank_items)
    check_year_built = field_validator("year_built")(_check_year_built)


# -----------------------
# Projects / developments
# -----------------------
class ProjectIn(ApiModel):
    name: str = Field(min_length=3)
    location: str = Field(min_length=3)
    developer: str = Field(min_length=2)
    image_url: HttpUrl | None = None
    description: str = ""
    key_highlights: list[str] = Field(min_length=1)
    amenities: list[str] = Field(default_factory=list)
    is_verified: bool = False
    status: Literal[PROJECT_STATUSES] | None = None  # type: ignore[valid-type]
    timeline: str = ""
    learn_more_link: HttpUrl | None = None

    drop_blank_items = field_validator("key_highlights", "amenities", mode="before")(_drop_blank_items)


class ProjectUpdateIn(ApiModel):
    name: str | None = Field(default=None, min_length=3)
    location: str | None = Field(default=None, min_length=3)
    developer: str | None = Field(default=None, min_length=2)
    image_url: HttpUrl | None = None
    description: str | None = None
    key_highlights: list[str] | None = Field(default=None, min_length=1)
    amenities: list[str] | None = None
    is_verified: bool | None = None
    status: Literal[PROJECT_STATUSES] | None = None  # type: ignore[valid-type]
    timeline: str | None = None
    learn_more_link: HttpUrl | None = None

    drop_blank_items = field_validator("key_highlights", "amenities", mode="before")(_drop_blank_items)


# -----------------------
# Blog
# -----------------------
class BlogPostIn(ApiModel):
    title: str = Field(min_length=5)
    excerpt: str = Field(min_length=10)
    content: str = Field(min_length=50)
    image_url: HttpUrl
    category: Literal[BLOG_CATEGORIES]  # type: ignore[valid-type]
    author: str | None = None
    # Comma-separated in the submission form; a list is accepted too.
    tags: str | list[str] | None = None
    status: Literal[BLOG_STATUSES] = "draft"  # type: ignore[valid-type]


class BlogPostUpdateIn(ApiModel):
    title: str | None = Field(default=None, min_length=5)
    excerpt: str | None = Field(default=None, min_length=10)
    content: str | None = Field(default=None, min_length=50)
    image_url: HttpUrl | None = None
    category: Literal[BLOG_CATEGORIES] | None = None  # type: ignore[valid-type]
    author: str | None = None
    tags: str | list[str] | None = None
    status: Literal[BLOG_STATUSES] | None = None  # type: ignore[valid-type]


# -----------------------
# Testimonials
# -----------------------
class TestimonialIn(ApiModel):
    name: str = Field(min_length=2)
    role: str = Field(min_length=2)
    quote: str = Field(min_length=10)
    rating: float = Field(ge=1, le=5)
    image_url: HttpUrl | Literal[""] | None = None
    success_tag: str | None = None
