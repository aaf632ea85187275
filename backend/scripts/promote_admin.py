"""
Mark an existing account as the protected primary admin.

Usage (from backend/):
  DATABASE_URL=... python scripts/promote_admin.py someone@example.com
"""

from __future__ import annotations

import argparse
import os
import sys

# Ensure `realtor` imports work when running from backend/.
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlalchemy import select  # noqa: E402

from realtor.db import session_scope  # noqa: E402
from realtor.models import User  # noqa: E402
from realtor.moderation import log_moderation  # noqa: E402


def promote(email: str) -> int:
    """Returns the promoted user's id; raises SystemExit when no such user exists."""
    email = (email or "").strip().lower()
    with session_scope() as db:
        u = db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        if not u:
            raise SystemExit(f"No user with email {email}")
        previous = u.role
        u.role = "admin"
        u.is_protected = True
        db.add(u)
        db.flush()
        log_moderation(db, actor_user_id=u.id, entity_type="user", entity_id=u.id, action="role", reason=f"{previous} -> admin (cli)")
        return int(u.id)


def main() -> None:
    parser = argparse.ArgumentParser(description="Promote a user to protected primary admin.")
    parser.add_argument("email")
    args = parser.parse_args()
    if not (os.environ.get("DATABASE_URL") or "").strip():
        raise SystemExit("DATABASE_URL is required")
    user_id = promote(args.email)
    print(f"Promoted user_id={user_id} to protected admin.")


if __name__ == "__main__":
    main()
