"""
Shared fixtures.

The environment is configured before `realtor` is imported: the engine is
created at import time from DATABASE_URL, so every test session gets its own
temporary sqlite file.
"""

from __future__ import annotations

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="realtor-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["JWT_SECRET"] = "test-signing-secret-0123456789abcdef0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "test"
os.environ.pop("PRIMARY_ADMIN_EMAIL", None)
os.environ.pop("PRIMARY_ADMIN_PASSWORD", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import delete  # noqa: E402

from realtor.db import init_db, session_scope  # noqa: E402
from realtor.main import app  # noqa: E402
from realtor.models import Base, BlogPost, Project, Property, User  # noqa: E402
from realtor.security import create_access_token, hash_password  # noqa: E402
from realtor.serializers import dump_list  # noqa: E402

init_db()


@pytest.fixture(autouse=True)
def _clean_tables():
    yield
    with session_scope() as db:
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(delete(table))


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def make_user():
    counter = {"n": 0}

    def _make(
        *,
        name: str = "Test User",
        email: str | None = None,
        role: str = "user",
        password: str = "secret1",
        phone: str = "",
        is_protected: bool = False,
    ) -> User:
        counter["n"] += 1
        with session_scope() as db:
            u = User(
                name=name,
                email=(email or f"user{counter['n']}@example.com").lower(),
                password_hash=hash_password(password),
                role=role,
                phone=phone,
                is_protected=is_protected,
            )
            db.add(u)
            db.flush()
            return u

    return _make


def auth_headers(u: User) -> dict[str, str]:
    token = create_access_token(user_id=u.id, email=u.email, name=u.name, role=u.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def admin(make_user) -> User:
    return make_user(name="Site Admin", email="admin@example.com", role="admin")


def property_payload(**overrides) -> dict:
    payload = {
        "address": "12 Harbour View Road",
        "city": "Lahore",
        "state": "Punjab",
        "zip": "54000",
        "price": 250000,
        "bedrooms": 3,
        "bathrooms": 2,
        "areaSqFt": 1800,
        "description": "Bright family home close to parks and schools.",
        "propertyType": "House",
        "status": "For Sale",
        "images": ["https://images.example.com/house-1.jpg"],
        "features": ["Garden", "Garage"],
    }
    payload.update(overrides)
    return payload


def blog_payload(**overrides) -> dict:
    payload = {
        "title": "How to buy your first home",
        "excerpt": "A short guide for first-time buyers.",
        "content": "Start with a budget, get pre-approved, and compare neighbourhoods before you make an offer.",
        "imageUrl": "https://images.example.com/blog-1.jpg",
        "category": "Buying Guide",
        "tags": "buying, first home",
        "status": "published",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_property():
    def _make(owner: User | None, **fields) -> Property:
        values = {
            "address": "7 Canal Bank Road",
            "city": "Lahore",
            "state": "Punjab",
            "zip": "54000",
            "price": 100000.0,
            "bedrooms": 2,
            "bathrooms": 1.0,
            "area_sq_ft": 900.0,
            "description": "Compact apartment near the canal and the metro.",
            "images_json": dump_list(["https://images.example.com/apt.jpg"]),
            "property_type": "Apartment",
            "status": "For Sale",
            "approval_status": "Approved",
        }
        values.update(fields)
        with session_scope() as db:
            p = Property(submitted_by_id=owner.id if owner else None, **values)
            db.add(p)
            db.flush()
            return p

    return _make


@pytest.fixture
def make_blog_post():
    counter = {"n": 0}

    def _make(owner: User | None, **fields) -> BlogPost:
        counter["n"] += 1
        values = {
            "title": f"Market update {counter['n']}",
            "slug": f"market-update-{counter['n']}",
            "excerpt": "Prices are steady this quarter.",
            "content": "x" * 60,
            "image_url": "https://images.example.com/blog.jpg",
            "author": "Staff",
            "category": "Market Trends",
            "status": "published",
            "approval_status": "Approved",
        }
        values.update(fields)
        with session_scope() as db:
            b = BlogPost(submitted_by_id=owner.id if owner else None, **values)
            db.add(b)
            db.flush()
            return b

    return _make


@pytest.fixture
def make_project():
    def _make(owner: User | None, **fields) -> Project:
        values = {
            "name": "Lakeside Towers",
            "location": "DHA Phase 6",
            "developer": "Albatross Builders",
            "key_highlights_json": dump_list(["Lake view"]),
            "approval_status": "Approved",
            "status": "Upcoming",
        }
        values.update(fields)
        with session_scope() as db:
            p = Project(submitted_by_id=owner.id if owner else None, **values)
            db.add(p)
            db.flush()
            return p

    return _make
