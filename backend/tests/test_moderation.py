from __future__ import annotations

import dataclasses
from types import SimpleNamespace

import pytest

from realtor.errors import ServerError, ValidationFailed, public_message_for
from realtor.moderation import BLOG_POST_POLICY, PROJECT_POLICY, PROPERTY_POLICY, ModerationPolicy
from realtor.pagination import Page


def _listing(**fields):
    values = {"approval_status": "Pending", "status": "For Sale", "updated_at": None}
    values.update(fields)
    return SimpleNamespace(**values)


@pytest.mark.parametrize(
    "policy, role, expected",
    [
        (PROPERTY_POLICY, "user", "Pending"),
        (PROPERTY_POLICY, "agent", "Pending"),
        (PROPERTY_POLICY, "admin", "Approved"),
        (BLOG_POST_POLICY, "user", "Pending"),
        (BLOG_POST_POLICY, "agent", "Approved"),
        (PROJECT_POLICY, "admin", "Approved"),
    ],
)
def test_initial_state(policy, role, expected):
    assert policy.initial_state(role) == expected


def test_property_rejection_forces_draft():
    p = _listing(approval_status="Approved", status="For Rent")
    previous = PROPERTY_POLICY.transition(p, "Rejected")
    assert previous == "Approved"
    assert p.approval_status == "Rejected"
    assert p.status == "Draft"
    assert p.updated_at is not None


def test_any_state_can_move_to_any_state():
    p = _listing(approval_status="Rejected", status="Draft")
    PROPERTY_POLICY.transition(p, "Approved")
    assert p.approval_status == "Approved"
    assert p.status == "Draft"
    PROPERTY_POLICY.transition(p, "Pending")
    assert p.approval_status == "Pending"


def test_blog_rejection_leaves_status():
    b = _listing(status="published")
    BLOG_POST_POLICY.transition(b, "Rejected")
    assert b.status == "published"


def test_rejection_is_the_only_transition_hook():
    assert [f.name for f in dataclasses.fields(ModerationPolicy)] == [
        "entity_type",
        "auto_approve_roles",
        "on_reject",
    ]
    p = _listing(status="For Sale")
    PROPERTY_POLICY.transition(p, "Approved")
    assert p.status == "For Sale"


def test_unknown_target_state():
    with pytest.raises(ValidationFailed) as exc:
        PROJECT_POLICY.transition(_listing(), "Archived")
    assert exc.value.status_code == 400
    assert "approvalStatus" in exc.value.details


def test_page_math():
    assert Page(items=[], current_page=3, page_size=10, total=25).total_pages == 3
    assert Page(items=[], current_page=1, page_size=10, total=0).total_pages == 0
    assert Page(items=[], current_page=1, page_size=10, total=10).meta()["totalPages"] == 1


def test_public_message_for_config_errors():
    assert public_message_for(RuntimeError("boom")) == ServerError.message
    assert "Database configuration error" in public_message_for(RuntimeError("unable to open database file"))
    assert "JWT secret" in public_message_for(RuntimeError("JWT_SECRET is invalid"))
