"""CRUD, slugs, delete guards, bulk actions and revisions through the JSON API."""

from app.cms.db import session_scope
from app.cms.models import ActivityLog
from app.cms.modules.blog.models import BlogPost


def _create(client, path, **payload):
    r = client.post(path, json=payload)
    assert r.status_code == 201, r.json
    return r.json


def test_specialty_crud_roundtrip(client, login):
    login(client)
    sp = _create(client, "/api/specialties", name="Cardiology", category="super_specialty", status="published")
    assert sp["slug"] == "cardiology"
    assert sp["status"] == "published"

    r = client.get(f"/api/specialties/{sp['id']}")
    assert r.status_code == 200
    assert r.json["name"] == "Cardiology"

    r = client.put(f"/api/specialties/{sp['id']}", json={"description": "Heart care"})
    assert r.status_code == 200
    assert r.json["description"] == "Heart care"
    assert r.json["name"] == "Cardiology"

    r = client.delete(f"/api/specialties/{sp['id']}")
    assert r.status_code == 200
    assert client.get(f"/api/specialties/{sp['id']}").status_code == 404


def test_new_items_default_to_draft(client, login):
    login(client)
    t = _create(client, "/api/treatments", name="Knee Replacement")
    assert t["status"] == "draft"
    assert t["slug"] == "knee-replacement"


def test_required_field_missing(client, login):
    login(client)
    r = client.post("/api/specialties", json={"description": "no name"})
    assert r.status_code == 400
    assert "Name is required" in r.json["error"]


def test_invalid_choice_and_status_rejected(client, login):
    login(client)
    r = client.post("/api/specialties", json={"name": "X", "category": "astrology"})
    assert r.status_code == 400
    r = client.post("/api/specialties", json={"name": "X", "status": "live"})
    assert r.status_code == 400
    assert "Invalid status" in r.json["error"]


def test_unknown_foreign_key_rejected(client, login):
    login(client)
    r = client.post("/api/treatments", json={"name": "Bypass", "specialty_id": 999})
    assert r.status_code == 400
    assert "Unknown specialty_id" in r.json["error"]


def test_duplicate_slug_rejected(client, login):
    login(client)
    _create(client, "/api/destinations", name="India")
    r = client.post("/api/destinations", json={"name": "India Again", "slug": "india"})
    assert r.status_code == 400
    assert "slug already exists" in r.json["error"]


def test_blog_slug_gets_suffix_and_published_at(client, login):
    login(client)
    first = _create(client, "/api/blog", title="Why India", content="<p>Hello world</p>", status="published")
    second = _create(client, "/api/blog", title="Why India")
    assert first["slug"] == "why-india"
    assert second["slug"] == "why-india-2"
    assert first["published_at"] is not None
    assert second["published_at"] is None


def test_blog_posts_log_and_revise_as_blog_post(client, login):
    login(client)
    post = _create(client, "/api/blog", title="Recovery tips", content="<p>v1</p>")
    r = client.put(f"/api/blog/{post['id']}", json={"content": "<p>v2</p>"})
    assert r.status_code == 200

    acts = client.get("/api/dashboard/activity?entity_type=blog_post").json["activities"]
    assert {a["action"] for a in acts} == {"create", "update"}
    revs = client.get(f"/api/revisions/blog_post/{post['id']}").json
    assert len(revs) == 1


def test_unique_constraint_violation_returns_400_and_rolls_back(client, login, app):
    login(client)
    with session_scope(app) as s:
        slugs = ["why-india"] + [f"why-india-{n}" for n in range(2, 51)]
        for slug in slugs:
            s.add(BlogPost(title="Why India", slug=slug, status="draft"))

    # Every suffix is taken, so the insert reaches the UNIQUE constraint.
    r = client.post("/api/blog", json={"title": "Why India"})
    assert r.status_code == 400
    assert r.json["error"] == "A record with this value already exists"

    with session_scope(app) as s:
        assert s.query(BlogPost).count() == 50
        assert s.query(ActivityLog).filter(ActivityLog.entity_type == "blog_post").count() == 0

    r = client.post("/api/blog", json={"title": "Another post"})
    assert r.status_code == 201
    assert r.json["slug"] == "another-post"


def test_slug_check(client, login):
    login(client)
    sp = _create(client, "/api/specialties", name="Oncology")
    r = client.get("/api/specialties/slug-check/Oncology")
    assert r.json == {"slug": "oncology", "available": False, "existing": {"id": sp["id"], "title": "Oncology"}}

    r = client.get(f"/api/specialties/slug-check/oncology?exclude={sp['id']}")
    assert r.json["available"] is True


def test_delete_blocked_by_dependents(client, login):
    login(client)
    sp = _create(client, "/api/specialties", name="Orthopedics")
    _create(client, "/api/treatments", name="Knee Replacement", specialty_id=sp["id"])
    _create(client, "/api/treatments", name="Hip Replacement", specialty_id=sp["id"])

    r = client.delete(f"/api/specialties/{sp['id']}")
    assert r.status_code == 409
    assert r.json["dependencies"] == ["2 treatment(s)"]
    assert "2 treatment(s)" in r.json["error"]
    assert client.get(f"/api/specialties/{sp['id']}").status_code == 200


def test_bulk_publish_and_delete(client, login):
    login(client)
    ids = [_create(client, "/api/videos", title=f"Video {n}", youtube_url=f"https://youtu.be/abcdefghij{n}")["id"] for n in range(3)]

    r = client.post("/api/videos/bulk", json={"ids": ids, "action": "publish"})
    assert r.status_code == 200
    assert r.json["count"] == 3
    statuses = {v["status"] for v in client.get("/api/videos").json}
    assert statuses == {"published"}

    r = client.post("/api/videos/bulk", json={"ids": ids[:2], "action": "delete"})
    assert r.json["count"] == 2
    assert len(client.get("/api/videos").json) == 1


def test_bulk_delete_blocked_lists_items(client, login):
    login(client)
    d1 = _create(client, "/api/destinations", name="India")
    d2 = _create(client, "/api/destinations", name="Thailand")
    _create(client, "/api/hospitals", name="Apollo", destination_id=d1["id"])

    r = client.post("/api/destinations/bulk", json={"ids": [d1["id"], d2["id"]], "action": "delete"})
    assert r.status_code == 409
    assert r.json["blocked"] == [{"id": d1["id"], "title": "India", "dependencies": ["1 hospital(s)"]}]
    # nothing deleted when any item is blocked
    assert len(client.get("/api/destinations").json) == 2


def test_bulk_rejects_bad_input(client, login):
    login(client)
    assert client.post("/api/specialties/bulk", json={"ids": [], "action": "publish"}).status_code == 400
    assert client.post("/api/specialties/bulk", json={"ids": [1], "action": "explode"}).status_code == 400


def test_list_filters(client, login):
    login(client)
    sp1 = _create(client, "/api/specialties", name="Cardiology")
    sp2 = _create(client, "/api/specialties", name="Neurology")
    _create(client, "/api/treatments", name="Bypass", specialty_id=sp1["id"], status="published")
    _create(client, "/api/treatments", name="Spine Surgery", specialty_id=sp2["id"])

    r = client.get(f"/api/treatments?specialty_id={sp1['id']}")
    assert [t["name"] for t in r.json] == ["Bypass"]
    r = client.get("/api/treatments?status=draft")
    assert [t["name"] for t in r.json] == ["Spine Surgery"]

    r = client.get("/api/treatments?specialty_id=abc")
    assert r.status_code == 400
    assert r.json["error"] == "Invalid specialty_id"


def test_listing_endpoint_paginates_and_counts(client, login):
    login(client)
    for n in range(25):
        _create(client, "/api/destinations", name=f"Place {n:02d}", status="published" if n % 2 else "draft")

    r = client.get("/api/destinations/listing?sort=name&dir=asc&per_page=20&page=2")
    assert r.status_code == 200
    data = r.json
    assert data["total"] == 25
    assert data["pages"] == 2
    assert data["page"] == 2
    assert [i["name"] for i in data["items"]] == [f"Place {n:02d}" for n in range(20, 25)]
    assert data["counts"]["all"] == 25
    assert data["counts"]["published"] == 12

    r = client.get("/api/destinations/listing?tab=published&q=place 1")
    assert {i["name"] for i in r.json["items"]} == {"Place 11", "Place 13", "Place 15", "Place 17", "Place 19"}


def test_updates_keep_revisions(client, login):
    login(client)
    sp = _create(client, "/api/specialties", name="Dermatology", long_description="<p>v1</p>")
    client.put(f"/api/specialties/{sp['id']}", json={"long_description": "<p>v2</p>"})
    client.put(f"/api/specialties/{sp['id']}", json={"long_description": "<p>v3</p>", "_autoSave": True})

    revs = client.get(f"/api/revisions/specialty/{sp['id']}").json
    assert [r["revision_type"] for r in revs] == ["autosave", "manual"]

    detail = client.get(f"/api/revisions/detail/{revs[-1]['id']}").json
    assert detail["content"] == "<p>v1</p>"
    assert detail["title"] == "Dermatology"
    assert client.get("/api/revisions/detail/9999").status_code == 404


def test_autosave_is_not_logged_as_activity(client, login):
    login(client)
    sp = _create(client, "/api/specialties", name="Urology")
    client.put(f"/api/specialties/{sp['id']}", json={"description": "draft text", "_autoSave": True})
    acts = client.get("/api/dashboard/activity?entity_type=specialty").json["activities"]
    assert [a["action"] for a in acts] == ["create"]


def test_testimonial_slug_from_patient_and_rating(client, login):
    login(client)
    t1 = _create(client, "/api/testimonials", patient_name="John Smith", quote="Great care", rating=5)
    t2 = _create(client, "/api/testimonials", patient_name="John Smith", quote="Again", rating=4)
    assert t1["slug"] != t2["slug"]
    assert t2["slug"].endswith("-2")


def test_treatment_cost_upsert(client, login):
    login(client)
    t = _create(client, "/api/treatments", name="Knee Replacement")
    d = _create(client, "/api/destinations", name="India")

    r = client.post("/api/treatment-costs/upsert", json={"treatment_id": t["id"], "destination_id": d["id"], "cost_min_usd": 4000, "cost_max_usd": 7000})
    assert r.status_code == 201
    cost_id = r.json["id"]

    r = client.post("/api/treatment-costs/upsert", json={"treatment_id": t["id"], "destination_id": d["id"], "cost_max_usd": 8000, "cost_min_usd": None})
    assert r.status_code == 200
    assert r.json["id"] == cost_id
    assert r.json["cost_min_usd"] == 4000
    assert r.json["cost_max_usd"] == 8000

    r = client.post("/api/treatment-costs", json={"treatment_id": t["id"], "destination_id": d["id"]})
    assert r.status_code == 400

    r = client.delete(f"/api/treatments/{t['id']}")
    assert r.status_code == 409
    assert r.json["dependencies"] == ["1 treatment cost(s)"]


def test_cost_min_cannot_exceed_max(client, login):
    login(client)
    t = _create(client, "/api/treatments", name="Bypass")
    d = _create(client, "/api/destinations", name="Turkey")
    r = client.post("/api/treatment-costs", json={"treatment_id": t["id"], "destination_id": d["id"], "cost_min_usd": 9000, "cost_max_usd": 100})
    assert r.status_code == 400
