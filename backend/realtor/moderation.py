"""
Listing approval workflow shared by properties, projects and blog posts.

States are `Pending`, `Approved` and `Rejected`; an admin may move an entity
between any two of them. Per-kind differences (who is auto-approved on
submission, what a rejection does to the listing) live in `ModerationPolicy`.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy.orm import Session

from realtor.errors import ValidationFailed
from realtor.models import APPROVAL_STATUSES, ModerationLog

logger = logging.getLogger(__name__)

PENDING = "Pending"
APPROVED = "Approved"
REJECTED = "Rejected"

_ACTIONS = {PENDING: "pending", APPROVED: "approve", REJECTED: "reject"}


def _reject_property(entity: Any) -> None:
    # A rejected listing goes back to the submitter as a draft.
    entity.status = "Draft"


@dataclass(frozen=True)
class ModerationPolicy:
    entity_type: str
    auto_approve_roles: frozenset[str]
    on_reject: Callable[[Any], None] | None = None

    def initial_state(self, submitter_role: str) -> str:
        return APPROVED if submitter_role in self.auto_approve_roles else PENDING

    def transition(self, entity: Any, target: str) -> str:
        """
        Move `entity.approval_status` to `target` and apply side effects.
        Returns the previous state.
        """
        if target not in APPROVAL_STATUSES:
            raise ValidationFailed(
                "Invalid input data.",
                details={"approvalStatus": [f"Must be one of: {', '.join(APPROVAL_STATUSES)}"]},
            )
        previous = entity.approval_status
        entity.approval_status = target
        if target == REJECTED and self.on_reject:
            self.on_reject(entity)
        entity.updated_at = dt.datetime.now(dt.timezone.utc)
        return previous


PROPERTY_POLICY = ModerationPolicy(
    entity_type="property",
    auto_approve_roles=frozenset({"admin"}),
    on_reject=_reject_property,
)
PROJECT_POLICY = ModerationPolicy(entity_type="project", auto_approve_roles=frozenset({"admin"}))
BLOG_POST_POLICY = ModerationPolicy(entity_type="blog_post", auto_approve_roles=frozenset({"admin", "agent"}))


def log_moderation(
    db: Session,
    *,
    actor_user_id: int,
    entity_type: str,
    entity_id: int,
    action: str,
    reason: str = "",
) -> None:
    db.add(
        ModerationLog(
            actor_user_id=int(actor_user_id),
            entity_type=(entity_type or "").strip(),
            entity_id=int(entity_id),
            action=(action or "").strip(),
            reason=(reason or "").strip(),
        )
    )


def moderate(db: Session, policy: ModerationPolicy, entity: Any, target: str, *, actor_user_id: int) -> None:
    previous = policy.transition(entity, target)
    db.add(entity)
    log_moderation(
        db,
        actor_user_id=actor_user_id,
        entity_type=policy.entity_type,
        entity_id=entity.id,
        action=_ACTIONS[target],
        reason=f"{previous} -> {target}",
    )
    logger.info(
        "Moderation: %s id=%s %s -> %s by user_id=%s", policy.entity_type, entity.id, previous, target, actor_user_id
    )
