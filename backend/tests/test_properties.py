from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from sqlalchemy import select

from conftest import property_payload
from realtor.db import session_scope
from realtor.models import ModerationLog, Property
from realtor.routes_properties import increment_property_view


def test_user_submission_starts_pending(client, make_user, headers_for):
    u = make_user()
    r = client.post("/properties", json=property_payload(), headers=headers_for(u))
    assert r.status_code == 201
    data = r.json()["data"]
    assert data["approvalStatus"] == "Pending"
    assert data["status"] == "For Sale"
    assert data["isVerified"] is False
    assert data["views"] == 0
    assert data["submittedBy"]["id"] == u.id


def test_status_defaults_to_pending_approval(client, make_user, headers_for):
    payload = property_payload()
    payload.pop("status")
    r = client.post("/properties", json=payload, headers=headers_for(make_user()))
    assert r.status_code == 201
    assert r.json()["data"]["status"] == "Pending Approval"


def test_admin_submission_is_auto_approved(client, admin, headers_for):
    r = client.post("/properties", json=property_payload(), headers=headers_for(admin))
    assert r.status_code == 201
    assert r.json()["data"]["approvalStatus"] == "Approved"


def test_submission_requires_authentication(client):
    r = client.post("/properties", json=property_payload())
    assert r.status_code == 401


def test_submission_validation_errors_are_itemized(client, make_user, headers_for):
    payload = property_payload(zip="ABCDE", description="too short", images=["", "not a url"], yearBuilt=1700)
    r = client.post("/properties", json=payload, headers=headers_for(make_user()))
    assert r.status_code == 400
    details = r.json()["details"]
    assert "zip" in details
    assert "description" in details
    assert "yearBuilt" in details
    assert any(k.startswith("images") for k in details)


def test_blank_image_entries_are_dropped(client, make_user, headers_for):
    payload = property_payload(images=["https://images.example.com/a.jpg", "  "])
    r = client.post("/properties", json=payload, headers=headers_for(make_user()))
    assert r.status_code == 201
    assert r.json()["data"]["images"] == ["https://images.example.com/a.jpg"]


def test_public_list_only_shows_approved(client, make_user, make_property):
    owner = make_user()
    make_property(owner, approval_status="Approved", status="For Sale")
    make_property(owner, approval_status="Approved", status="For Rent")
    make_property(owner, approval_status="Pending")
    make_property(owner, approval_status="Rejected", status="Draft")

    r = client.get("/properties")
    items = r.json()["data"]
    assert len(items) == 2
    assert {p["approvalStatus"] for p in items} == {"Approved"}
    assert all("email" not in (p["submittedBy"] or {}) for p in items)

    assert len(client.get("/properties", params={"status": "For Rent"}).json()["data"]) == 1
    assert client.get("/properties", params={"status": "Sold"}).json()["data"] == []


def test_admin_list_sees_everything(client, admin, make_user, make_property, headers_for):
    owner = make_user()
    make_property(owner, approval_status="Approved")
    make_property(owner, approval_status="Pending", status="Pending Approval")
    make_property(admin, approval_status="Approved")

    h = headers_for(admin)
    assert len(client.get("/properties", headers=h).json()["data"]) == 3
    mine = client.get("/properties", params={"submittedById": owner.id}, headers=h).json()["data"]
    assert len(mine) == 2
    assert mine[0]["submittedBy"]["email"] == owner.email
    pending = client.get("/properties", params={"status": "Pending Approval"}, headers=h).json()["data"]
    assert len(pending) == 1


def test_unapproved_detail_visible_to_owner_and_admin_only(client, admin, make_user, make_property, headers_for):
    owner = make_user()
    stranger = make_user()
    p = make_property(owner, approval_status="Pending")

    assert client.get(f"/properties/{p.id}").status_code == 403
    assert client.get(f"/properties/{p.id}", headers=headers_for(stranger)).status_code == 403
    assert client.get(f"/properties/{p.id}", headers=headers_for(owner)).status_code == 200
    assert client.get(f"/properties/{p.id}", headers=headers_for(admin)).status_code == 200


def test_detail_not_found_and_bad_id(client):
    assert client.get("/properties/999").status_code == 404
    r = client.get("/properties/not-an-id")
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid input data."


def test_reject_forces_draft_and_is_logged(client, admin, make_user, make_property, headers_for):
    p = make_property(make_user(), approval_status="Pending", status="For Sale")
    r = client.patch(
        f"/properties/{p.id}/update-status", json={"approvalStatus": "Rejected"}, headers=headers_for(admin)
    )
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "Draft"

    with session_scope() as db:
        stored = db.get(Property, p.id)
        assert stored.approval_status == "Rejected"
        assert stored.status == "Draft"
        actions = db.execute(
            select(ModerationLog.action).where(ModerationLog.entity_type == "property", ModerationLog.entity_id == p.id)
        ).scalars().all()
        assert "reject" in actions


def test_approve_keeps_listing_status(client, admin, make_user, make_property, headers_for):
    p = make_property(make_user(), approval_status="Pending", status="For Rent")
    r = client.patch(
        f"/properties/{p.id}/update-status", json={"approvalStatus": "Approved"}, headers=headers_for(admin)
    )
    assert r.status_code == 200
    assert r.json()["data"]["approvalStatus"] == "Approved"
    assert r.json()["data"]["status"] == "For Rent"


def test_moderation_is_admin_only_and_validated(client, admin, make_user, make_property, headers_for):
    owner = make_user()
    p = make_property(owner, approval_status="Pending")
    r = client.patch(f"/properties/{p.id}/update-status", json={"approvalStatus": "Approved"}, headers=headers_for(owner))
    assert r.status_code == 403
    assert r.json()["error"] == "Forbidden: Admin access required"

    r = client.patch(f"/properties/{p.id}/update-status", json={"approvalStatus": "Maybe"}, headers=headers_for(admin))
    assert r.status_code == 400

    r = client.patch("/properties/999/update-status", json={"approvalStatus": "Approved"}, headers=headers_for(admin))
    assert r.status_code == 404


def test_owner_update_and_stranger_forbidden(client, make_user, make_property, headers_for):
    owner = make_user()
    p = make_property(owner)
    r = client.put(f"/properties/{p.id}", json={"price": 120000, "features": ["Pool"]}, headers=headers_for(owner))
    assert r.status_code == 200
    assert r.json()["data"]["price"] == 120000
    assert r.json()["data"]["features"] == ["Pool"]

    r = client.put(f"/properties/{p.id}", json={"price": 1}, headers=headers_for(make_user()))
    assert r.status_code == 403


def test_owner_edit_resubmits_rejected_listing(client, make_user, make_property, headers_for):
    owner = make_user()
    p = make_property(owner, approval_status="Rejected", status="Draft")
    r = client.put(f"/properties/{p.id}", json={"status": "For Sale"}, headers=headers_for(owner))
    assert r.status_code == 200
    assert r.json()["data"]["approvalStatus"] == "Pending"
    assert r.json()["data"]["status"] == "For Sale"


def test_admin_edit_of_rejected_listing_stays_draft(client, admin, make_user, make_property, headers_for):
    p = make_property(make_user(), approval_status="Rejected", status="Draft")
    r = client.put(f"/properties/{p.id}", json={"status": "For Sale"}, headers=headers_for(admin))
    assert r.status_code == 200
    assert r.json()["data"]["approvalStatus"] == "Rejected"
    assert r.json()["data"]["status"] == "Draft"


def test_delete_is_admin_only(client, admin, make_user, make_property, headers_for):
    owner = make_user()
    p = make_property(owner)
    assert client.delete(f"/properties/{p.id}", headers=headers_for(owner)).status_code == 403
    assert client.delete(f"/properties/{p.id}", headers=headers_for(admin)).status_code == 200
    assert client.get(f"/properties/{p.id}").status_code == 404


def test_increment_view(client, make_user, make_property):
    p = make_property(make_user())
    assert client.patch(f"/properties/{p.id}/increment-view").json()["data"]["views"] == 1
    assert client.patch(f"/properties/{p.id}/increment-view").json()["data"]["views"] == 2
    assert client.patch("/properties/999/increment-view").status_code == 404


def test_concurrent_view_increments_are_not_lost(make_user, make_property):
    p = make_property(make_user())

    def _view(_):
        with session_scope() as db:
            increment_property_view(p.id, db)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(_view, range(20)))

    with session_scope() as db:
        assert db.get(Property, p.id).views == 20


def test_my_properties_scoped_to_caller(client, make_user, make_property, headers_for):
    me = make_user()
    make_property(me, property_type="House", approval_status="Pending")
    make_property(me, property_type="Apartment")
    make_property(make_user())

    r = client.get("/my-properties", headers=headers_for(me))
    assert len(r.json()["data"]) == 2
    r = client.get("/my-properties", params={"type": "House"}, headers=headers_for(me))
    assert [p["propertyType"] for p in r.json()["data"]] == ["House"]


def test_admin_properties_paginated(client, admin, make_user, make_property, headers_for):
    owner = make_user()
    for i in range(12):
        make_property(owner, approval_status="Pending" if i % 2 else "Approved", city="Karachi" if i < 3 else "Lahore")

    h = headers_for(admin)
    body = client.get("/admin/properties", params={"page": 2, "limit": 5}, headers=h).json()
    assert len(body["data"]) == 5
    assert body["pagination"] == {"currentPage": 2, "totalPages": 3, "total": 12, "pageSize": 5}

    pending = client.get("/admin/properties", params={"approvalStatus": "Pending"}, headers=h).json()
    assert pending["pagination"]["total"] == 6

    found = client.get("/admin/properties", params={"search": "karachi"}, headers=h).json()
    assert found["pagination"]["total"] == 3


def test_admin_properties_search_treats_wildcards_literally(client, admin, make_user, make_property, headers_for):
    owner = make_user()
    make_property(owner, address="12 Mall Road")
    make_property(owner, address="Plot 100% Corner")
    h = headers_for(admin)

    body = client.get("/admin/properties", params={"search": "%"}, headers=h).json()
    assert [p["address"] for p in body["data"]] == ["Plot 100% Corner"]
    assert client.get("/admin/properties", params={"search": "_"}, headers=h).json()["pagination"]["total"] == 0
