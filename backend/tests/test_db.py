from __future__ import annotations

import pytest
from sqlalchemy import select, text

from realtor.db import ENGINE, session_scope
from realtor.models import User


def test_sqlite_connections_enforce_foreign_keys():
    with ENGINE.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_session_scope_rolls_back_on_error():
    with pytest.raises(RuntimeError):
        with session_scope() as db:
            db.add(User(name="Ghost", email="ghost@example.com", password_hash="x", role="user"))
            db.flush()
            raise RuntimeError("boom")

    with session_scope() as db:
        assert db.execute(select(User).where(User.email == "ghost@example.com")).scalar_one_or_none() is None
