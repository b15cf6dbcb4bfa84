from app.cms.auth import _LOGIN_RATE_LIMIT


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True


def test_healthz_is_plain_text(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


def test_login_page_renders(client):
    r = client.get("/login")
    assert r.status_code == 200
    assert b"password" in r.data.lower()


def test_dashboard_redirects_anonymous_to_login(client):
    r = client.get("/", follow_redirects=False)
    assert r.status_code == 302
    assert "/login" in r.headers["Location"]


def test_api_requires_auth(client):
    r = client.get("/api/specialties")
    assert r.status_code == 401
    assert r.json["error"] == "Not authenticated"


def test_api_rejects_bad_token(client):
    client.set_cookie("token", "not-a-jwt")
    r = client.get("/api/specialties")
    assert r.status_code == 401
    assert r.json["error"] == "Invalid token"


def test_login_sets_cookie_and_me_works(client, login):
    r = login(client)
    assert r.json["success"] is True
    assert r.json["user"]["role"] == "super_admin"
    assert "token=" in r.headers["Set-Cookie"]
    assert "HttpOnly" in r.headers["Set-Cookie"]

    r = client.get("/api/auth/me")
    assert r.status_code == 200
    assert r.json["user"]["email"] == "admin@example.com"

    r = client.get("/")
    assert r.status_code == 200


def test_login_wrong_password(client):
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json["error"] == "Invalid credentials"


def test_login_missing_fields(client):
    r = client.post("/api/auth/login", json={"email": "admin@example.com"})
    assert r.status_code == 400


def test_login_rate_limited_after_repeated_failures(client):
    for _ in range(_LOGIN_RATE_LIMIT):
        client.post("/api/auth/login", json={"email": "admin@example.com", "password": "nope"})
    r = client.post("/api/auth/login", json={"email": "admin@example.com", "password": "password123"})
    assert r.status_code == 429


def test_form_login_and_logout(client):
    r = client.post("/login", data={"email": "editor@example.com", "password": "password123"}, follow_redirects=False)
    assert r.status_code == 302
    assert client.get("/api/auth/me").status_code == 200

    r = client.get("/logout", follow_redirects=False)
    assert r.status_code == 302
    assert client.get("/api/auth/me").status_code == 401


def test_unknown_api_route_is_json_404(client, login):
    login(client)
    r = client.get("/api/does-not-exist")
    assert r.status_code == 404
    assert "error" in r.json


def test_listing_pages_render(client, login):
    login(client)
    for path in ("/specialties", "/treatments", "/destinations", "/hospitals", "/doctors", "/blog",
                 "/testimonials", "/videos", "/treatment-costs", "/pages", "/submissions",
                 "/media", "/users", "/activity", "/settings"):
        r = client.get(path)
        assert r.status_code == 200, path


def test_studio_pages_render(client, login):
    login(client)
    r = client.get("/treatments/new")
    assert r.status_code == 200
    assert b"CPT_CONFIG" in r.data

    created = client.post("/api/treatments", json={"name": "Hip Replacement"}).json
    r = client.get(f"/treatments/edit/{created['id']}")
    assert r.status_code == 200
    assert b"Hip Replacement" in r.data

    assert client.get("/treatments/edit/9999").status_code == 404


def test_studio_loads_rich_text_editor_only_where_configured(client, login):
    login(client)
    r = client.get("/treatments/new")
    assert b"quill.js" in r.data
    assert b"quill.snow.css" in r.data
    assert b'<div id="studioContent" class="rich-editor"></div>' in r.data

    r = client.get("/testimonials/new")
    assert r.status_code == 200
    assert b"quill.js" not in r.data
    assert b'<textarea id="studioContent"' in r.data
