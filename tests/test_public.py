from app.cms.db import session_scope
from app.cms.models import Submission


def test_public_submit_stores_columns_and_extras(client, app):
    r = client.post(
        "/api/public/submit",
        json={
            "form_type": "quote",
            "name": "Jane Doe",
            "email": "jane@example.com",
            "treatment": "Knee Replacement",
            "budget": "5000",
            "preferred_destination": "India",
        },
    )
    assert r.status_code == 201
    assert r.json["success"] is True

    with session_scope(app) as s:
        sub = s.get(Submission, r.json["id"])
        assert sub.status == "new"
        assert sub.treatment == "Knee Replacement"
        assert sub.form_data == {"budget": "5000", "preferred_destination": "India"}


def test_public_submit_unwraps_nested_form_data(client, app):
    r = client.post(
        "/api/public/submit",
        json={
            "form_type": "quote",
            "email": "a@example.com",
            "form_data": {"budget": "5000", "travel_month": "May"},
            "source_page": "/india",
        },
    )
    assert r.status_code == 201

    with session_scope(app) as s:
        sub = s.get(Submission, r.json["id"])
        assert sub.form_data == {"budget": "5000", "travel_month": "May", "source_page": "/india"}


def test_public_submit_validation(client):
    r = client.post("/api/public/submit", json={"form_type": "spam", "email": "a@b.co"})
    assert r.status_code == 400
    assert "Invalid form type" in r.json["error"]

    r = client.post("/api/public/submit", json={"form_type": "contact", "name": "No Contact"})
    assert r.status_code == 400
    assert r.json["error"] == "Email or phone is required"

    r = client.post("/api/public/submit", json={"form_type": "contact", "email": "not-an-email"})
    assert r.status_code == 400

    r = client.post("/api/public/submit", json={"type": "career", "phone": "+1 555 0100"})
    assert r.status_code == 201


def test_public_endpoints_allow_any_origin(client):
    r = client.get("/api/public/maintenance", headers={"Origin": "https://www.example.org"})
    assert r.headers.get("Access-Control-Allow-Origin") in ("*", "https://www.example.org")


def test_submission_inbox_workflow(client, login):
    ids = [
        client.post("/api/public/submit", json={"form_type": t, "email": f"{t}@example.com"}).json["id"]
        for t in ("quote", "contact", "consultation")
    ]
    login(client)

    r = client.get("/api/submissions?type=contact")
    assert [s["id"] for s in r.json] == [ids[1]]

    assert client.post("/api/submissions", json={"form_type": "quote"}).status_code == 405

    r = client.put(f"/api/submissions/{ids[0]}", json={"status": "in_progress", "notes": "Called back"})
    assert r.status_code == 200
    assert r.json["status"] == "in_progress"

    r = client.put(f"/api/submissions/{ids[0]}", json={"status": "archived"})
    assert r.status_code == 400

    r = client.post("/api/submissions/bulk", json={"ids": ids[1:], "action": "closed"})
    assert r.json["count"] == 2

    stats = client.get("/api/dashboard/stats").json
    assert stats["total_submissions"] == 3
    assert stats["new_submissions"] == 0


def test_maintenance_toggle_and_public_status(client, login):
    assert client.get("/api/public/maintenance").json == {"maintenance": False, "message": ""}

    login(client)
    r = client.put("/api/maintenance/toggle", json={"enabled": True, "message": "Back soon"})
    assert r.status_code == 200
    assert r.json["maintenance"] is True

    assert client.get("/api/public/maintenance").json == {"maintenance": True, "message": "Back soon"}

    r = client.put("/api/maintenance/toggle", json={})
    assert r.json["maintenance"] is False


def test_settings_and_page_content(client, login):
    login(client)
    r = client.put("/api/settings", json={"site_name": "MedTour", "phone": "+91 000"})
    assert r.status_code == 200
    assert r.json["settings"]["site_name"] == "MedTour"
    assert client.get("/api/settings").json["phone"] == "+91 000"
    assert client.get("/api/dashboard/init").json["settings"]["site_name"] == "MedTour"

    r = client.put(
        "/api/page-content",
        json=[
            {"page": "home", "section": "hero", "field_key": "title", "field_value": "Care abroad"},
            {"page": "home", "section": "stats", "field_key": "patients", "field_value": 5000, "field_type": "number"},
        ],
    )
    assert r.status_code == 200
    assert r.json["count"] == 2
    rows = client.get("/api/page-content?page=home").json
    assert {(row["section"], row["field_key"], row["field_value"]) for row in rows} == {
        ("hero", "title", "Care abroad"),
        ("stats", "patients", "5000"),
    }


def test_dashboard_stats_and_activity(client, login):
    login(client)
    client.post("/api/blog", json={"title": "Post"})
    client.post("/api/specialties", json={"name": "Cardiology"})

    stats = client.get("/api/dashboard/stats").json
    assert stats["blog_posts"] == 1
    assert "specialties" not in stats
    full = client.get("/api/dashboard/stats-full").json
    assert full["specialties"] == 1

    data = client.get("/api/dashboard/activity?action=create&limit=1").json
    assert data["total"] == 2
    assert data["pages"] == 2
    assert len(data["activities"]) == 1
    assert data["activities"][0]["user_email"] == "admin@example.com"
