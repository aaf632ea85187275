from __future__ import annotations

import re

from conftest import blog_payload
from realtor.db import session_scope
from realtor.routes_blog import unique_slug


def test_user_post_pending_agent_post_approved(client, make_user, headers_for):
    user = make_user(name="Reader")
    agent = make_user(name="Agent Smith", role="agent", phone="123")

    r = client.post("/blog/posts", json=blog_payload(), headers=headers_for(user))
    assert r.status_code == 201
    assert r.json()["data"]["approvalStatus"] == "Pending"
    assert r.json()["data"]["author"] == "Reader"

    r = client.post("/blog/posts", json=blog_payload(author="Guest Writer"), headers=headers_for(agent))
    assert r.status_code == 201
    assert r.json()["data"]["approvalStatus"] == "Approved"
    assert r.json()["data"]["author"] == "Guest Writer"
    assert r.json()["data"]["tags"] == ["buying", "first home"]


def test_post_requires_authentication_and_valid_body(client, make_user, headers_for):
    assert client.post("/blog/posts", json=blog_payload()).status_code == 401
    r = client.post(
        "/blog/posts", json=blog_payload(title="Hi", content="short", category="Gossip"), headers=headers_for(make_user())
    )
    assert r.status_code == 400
    assert {"title", "content", "category"} <= set(r.json()["details"])


def test_slug_is_derived_and_unique(client, admin, headers_for):
    h = headers_for(admin)
    a = client.post("/blog/posts", json=blog_payload(title="Selling in Winter!"), headers=h).json()["data"]["slug"]
    b = client.post("/blog/posts", json=blog_payload(title="Selling in Winter!"), headers=h).json()["data"]["slug"]
    assert re.fullmatch(r"selling-in-winter-\d{13}", a)
    assert a != b


def test_unique_slug_bumps_on_collision(make_blog_post):
    with session_scope() as db:
        first = unique_slug(db, "Same Title")
    make_blog_post(None, slug=first)
    with session_scope() as db:
        second = unique_slug(db, "Same Title")
    assert second != first
    assert second.startswith("same-title-")


def test_public_list_requires_published_and_approved(client, make_user, make_blog_post):
    owner = make_user()
    make_blog_post(owner, category="News")
    make_blog_post(owner, category="Buying Guide")
    make_blog_post(owner, status="draft")
    make_blog_post(owner, approval_status="Pending")
    make_blog_post(owner, approval_status="Rejected")

    items = client.get("/blog/posts").json()["data"]
    assert len(items) == 2
    only_news = client.get("/blog/posts", params={"category": "News"}).json()["data"]
    assert [b["category"] for b in only_news] == ["News"]
    both = client.get("/blog/posts", params=[("category", "News"), ("category", "Buying Guide")]).json()["data"]
    assert len(both) == 2


def test_get_by_slug_hides_unpublished(client, make_blog_post):
    make_blog_post(None, slug="live-post")
    make_blog_post(None, slug="draft-post", status="draft")
    make_blog_post(None, slug="pending-post", approval_status="Pending")

    assert client.get("/blog/posts/live-post").status_code == 200
    for slug in ("draft-post", "pending-post", "missing"):
        r = client.get(f"/blog/posts/{slug}")
        assert r.status_code == 404
        assert r.json()["error"] == "Blog post not found or is not published"


def test_my_posts(client, make_user, make_blog_post, headers_for):
    me = make_user()
    make_blog_post(me, approval_status="Pending")
    make_blog_post(make_user())
    items = client.get("/blog/my-posts", headers=headers_for(me)).json()["data"]
    assert len(items) == 1
    assert items[0]["approvalStatus"] == "Pending"


def test_admin_moderation_and_crud(client, admin, make_user, make_blog_post, headers_for):
    h = headers_for(admin)
    b = make_blog_post(make_user(), approval_status="Pending")

    assert client.get("/admin/blog/posts", headers=headers_for(make_user())).status_code == 403

    body = client.get("/admin/blog/posts", params={"approvalStatus": "Pending"}, headers=h).json()
    assert body["pagination"]["total"] == 1

    r = client.patch(f"/admin/blog/posts/{b.id}", json={"approvalStatus": "Approved"}, headers=h)
    assert r.status_code == 200
    assert client.get(f"/blog/posts/{b.slug}").status_code == 200

    r = client.put(f"/admin/blog/posts/{b.id}", json={"title": "Updated market view", "tags": "a, b"}, headers=h)
    assert r.status_code == 200
    assert r.json()["data"]["title"] == "Updated market view"
    assert r.json()["data"]["slug"] == b.slug
    assert r.json()["data"]["tags"] == ["a", "b"]

    assert client.get(f"/admin/blog/posts/{b.id}", headers=h).status_code == 200
    assert client.delete(f"/admin/blog/posts/{b.id}", headers=h).status_code == 200
    assert client.get(f"/admin/blog/posts/{b.id}", headers=h).status_code == 404
