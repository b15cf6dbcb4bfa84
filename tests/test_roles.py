import pytest


@pytest.fixture()
def specialty_id(client, login):
    login(client, "super_admin")
    sp = client.post("/api/specialties", json={"name": "Cardiology"}).json
    client.get("/logout")
    return sp["id"]


def test_viewer_can_read_but_not_write(client, login, specialty_id):
    login(client, "viewer")
    assert client.get("/api/specialties").status_code == 200
    assert client.get(f"/api/specialties/{specialty_id}").status_code == 200

    r = client.post("/api/specialties", json={"name": "Neurology"})
    assert r.status_code == 403
    assert r.json["error"] == "Insufficient permissions"
    assert client.put(f"/api/specialties/{specialty_id}", json={"name": "X"}).status_code == 403
    assert client.get("/specialties/new").status_code == 403


def test_editor_can_edit_but_not_delete(client, login, specialty_id):
    login(client, "editor")
    r = client.put(f"/api/specialties/{specialty_id}", json={"status": "published"})
    assert r.status_code == 200

    assert client.delete(f"/api/specialties/{specialty_id}").status_code == 403

    r = client.post("/api/specialties/bulk", json={"ids": [specialty_id], "action": "delete"})
    assert r.status_code == 403
    assert r.json["error"] == "Only admins can delete"

    r = client.post("/api/specialties/bulk", json={"ids": [specialty_id], "action": "draft"})
    assert r.status_code == 200


def test_only_super_admin_manages_users_and_settings(client, login):
    login(client, "editor")
    assert client.get("/api/users").status_code == 403
    assert client.get("/users").status_code == 403
    assert client.put("/api/settings", json={"site_name": "X"}).status_code == 403
    assert client.put("/api/maintenance/toggle", json={"enabled": True}).status_code == 403


def test_user_management(client, login):
    login(client)
    r = client.post("/api/users", json={"name": "New", "email": "New@Example.com", "password": "longenough", "role": "viewer"})
    assert r.status_code == 201
    new_id = r.json["id"]
    assert r.json["email"] == "new@example.com"

    r = client.post("/api/users", json={"name": "Dup", "email": "new@example.com", "password": "longenough"})
    assert r.status_code == 400
    assert r.json["error"] == "Email already exists"

    r = client.post("/api/users", json={"name": "Short", "email": "short@example.com", "password": "short"})
    assert r.status_code == 400

    r = client.post("/api/users", json={"name": "Bad", "email": "bad@example.com", "password": "longenough", "role": "owner"})
    assert r.status_code == 400

    r = client.put(f"/api/users/{new_id}", json={"role": "editor", "is_active": False})
    assert r.status_code == 200
    assert r.json["role"] == "editor"
    assert r.json["is_active"] is False

    r = client.post("/api/auth/login", json={"email": "new@example.com", "password": "longenough"})
    assert r.status_code == 401


def test_cannot_demote_or_deactivate_self(client, login):
    me = login(client).json["user"]
    r = client.put(f"/api/users/{me['id']}", json={"role": "viewer"})
    assert r.status_code == 400
    assert r.json["error"] == "You cannot change your own role"
    r = client.put(f"/api/users/{me['id']}", json={"is_active": False})
    assert r.status_code == 400
    assert r.json["error"] == "You cannot deactivate your own account"


def test_deactivated_user_token_stops_working(client, login, app):
    login(client, "viewer")
    assert client.get("/api/auth/me").status_code == 200

    admin = app.test_client()
    login(admin)
    viewer_id = next(u["id"] for u in admin.get("/api/users").json if u["role"] == "viewer")
    admin.put(f"/api/users/{viewer_id}", json={"is_active": False})

    r = client.get("/api/auth/me")
    assert r.status_code == 401
    assert r.json["error"] == "Invalid token"
