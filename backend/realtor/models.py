from __future__ import annotations

import datetime as dt

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


ROLES = ("user", "agent", "admin")

PROPERTY_TYPES = (
    "House", "Apartment", "Condo", "Townhouse", "Land", "Plot",
    "Flat", "Upper Portion", "Lower Portion", "Farm House", "Room", "Penthouse",
    "Residential Plot", "Commercial Plot", "Agricultural Land", "Industrial Land", "Plot File", "Plot Form",
    "Office", "Shop", "Warehouse", "Factory", "Building", "Other",
)
PROPERTY_STATUSES = ("For Sale", "For Rent", "Sold", "Pending Approval", "Draft")
APPROVAL_STATUSES = ("Pending", "Approved", "Rejected")
PROJECT_STATUSES = ("Upcoming", "Trending", "Launched")
BLOG_STATUSES = ("draft", "published")
BLOG_CATEGORIES = ("Buying Guide", "Selling Guide", "Market Trends", "General Guide", "News")


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), default="")
    # Always stored lower-cased.
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(32), default="user", index=True)  # user | agent | admin
    phone: Mapped[str] = mapped_column(String(40), default="")
    specialty: Mapped[str] = mapped_column(String(255), default="")
    profile_picture_url: Mapped[str] = mapped_column(String(1024), default="")
    is_email_verified: Mapped[bool] = mapped_column(Boolean, default=True)
    # Primary admin: role cannot be changed away from admin.
    is_protected: Mapped[bool] = mapped_column(Boolean, default=False)

    # sha256 hex of the raw reset token; the raw token is never stored.
    password_reset_token: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    password_reset_expires: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class Property(Base):
    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    # Weak reference: users can disappear without cascading to their listings.
    submitted_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    address: Mapped[str] = mapped_column(String(512))
    city: Mapped[str] = mapped_column(String(120), index=True)
    state: Mapped[str] = mapped_column(String(80), default="")
    zip: Mapped[str] = mapped_column(String(10), default="")
    price: Mapped[float] = mapped_column(Float)
    bedrooms: Mapped[int] = mapped_column(Integer, default=0)
    bathrooms: Mapped[float] = mapped_column(Float, default=0)
    area_sq_ft: Mapped[float] = mapped_column(Float)
    description: Mapped[str] = mapped_column(Text, default="")
    images_json: Mapped[str] = mapped_column(Text, default="[]")  # JSON-encoded list of URLs
    property_type: Mapped[str] = mapped_column(String(40), index=True)
    year_built: Mapped[int | None] = mapped_column(Integer, nullable=True)
    features_json: Mapped[str] = mapped_column(Text, default="[]")
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    status: Mapped[str] = mapped_column(String(40), default="Pending Approval", index=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    approval_status: Mapped[str] = mapped_column(String(20), default="Pending", index=True)
    views: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    submitted_by = relationship("User", lazy="joined")


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    submitted_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    name: Mapped[str] = mapped_column(String(255))
    location: Mapped[str] = mapped_column(String(255))
    developer: Mapped[str] = mapped_column(String(255))
    image_url: Mapped[str] = mapped_column(String(1024), default="https://placehold.co/600x400.png")
    description: Mapped[str] = mapped_column(Text, default="")
    key_highlights_json: Mapped[str] = mapped_column(Text, default="[]")
    amenities_json: Mapped[str] = mapped_column(Text, default="[]")
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)  # Upcoming | Trending | Launched
    timeline: Mapped[str] = mapped_column(String(255), default="")
    learn_more_link: Mapped[str] = mapped_column(String(1024), default="")
    approval_status: Mapped[str] = mapped_column(String(20), default="Pending", index=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    submitted_by = relationship("User", lazy="joined")


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    submitted_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    title: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    excerpt: Mapped[str] = mapped_column(Text, default="")
    content: Mapped[str] = mapped_column(Text, default="")
    image_url: Mapped[str] = mapped_column(String(1024), default="")
    author: Mapped[str] = mapped_column(String(255), default="")
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True)  # draft | published
    category: Mapped[str] = mapped_column(String(40), index=True)
    tags_json: Mapped[str] = mapped_column(Text, default="[]")
    approval_status: Mapped[str] = mapped_column(String(20), default="Pending", index=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    submitted_by = relationship("User", lazy="joined")


class Testimonial(Base):
    __tablename__ = "testimonials"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(255))
    quote: Mapped[str] = mapped_column(Text)
    image_url: Mapped[str] = mapped_column(String(1024), default="https://placehold.co/80x80.png")
    rating: Mapped[float] = mapped_column(Float)
    success_tag: Mapped[str] = mapped_column(String(120), default="")

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class ModerationLog(Base):
    __tablename__ = "moderation_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    actor_user_id: Mapped[int] = mapped_column(Integer, index=True)
    entity_type: Mapped[str] = mapped_column(String(40), index=True)  # property|project|blog_post|testimonial|user
    entity_id: Mapped[int] = mapped_column(Integer, index=True)
    action: Mapped[str] = mapped_column(String(40), index=True)  # create|approve|reject|pending|delete|role
    reason: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
