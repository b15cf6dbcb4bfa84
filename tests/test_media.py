import io
from datetime import datetime
from pathlib import Path

from PIL import Image

from app.cms.modules.media.service import split_filename, title_from_filename


def _png(width=1600, height=900, color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, "PNG")
    return buf.getvalue()


def _upload(client, data: bytes, name: str, **form):
    return client.post(
        "/api/media/upload",
        data={"file": (io.BytesIO(data), name), **form},
        content_type="multipart/form-data",
    )


def test_split_filename_and_title():
    assert split_filename("My Photo (1).JPG") == ("my-photo-1", "jpg")
    assert split_filename("../../etc/passwd") == ("etc-passwd", "")
    assert split_filename("") == ("file", "")
    assert title_from_filename("knee-replacement_after.jpg") == "Knee Replacement After"


def test_upload_builds_sizes_and_serves_files(client, login, app):
    login(client)
    r = _upload(client, _png(), "Knee Scan.png", folder="scans")
    assert r.status_code == 201
    media = r.json
    prefix = datetime.utcnow().strftime("%Y/%m")
    assert media["url"] == f"/uploads/{prefix}/knee-scan.png"
    assert media["width"] == 1600 and media["height"] == 900
    assert media["title"] == "Knee Scan"
    assert media["folder"] == "scans"

    sizes = media["sizes"]
    assert sizes["thumbnail"]["width"] == 150 and sizes["thumbnail"]["height"] == 150
    assert sizes["medium"]["width"] == 400
    assert sizes["large"]["url"].endswith("-1200x675.png")
    assert sizes["large_webp"]["url"].endswith("-1200x675.webp")
    assert sizes["full_webp"]["url"] == f"/uploads/{prefix}/knee-scan.webp"

    root = Path(app.config["UPLOAD_ROOT"])
    assert (root / prefix / "knee-scan.png").exists()

    r = client.get(media["url"])
    assert r.status_code == 200
    assert r.mimetype == "image/png"
    assert client.get("/uploads/nope/missing.png").status_code == 404


def test_small_image_skips_larger_sizes(client, login):
    login(client)
    media = _upload(client, _png(300, 200), "icon.png").json
    assert set(media["sizes"]) == {"thumbnail", "thumbnail_webp", "full_webp"}


def test_name_collision_gets_counter(client, login):
    login(client)
    first = _upload(client, _png(100, 100), "logo.png").json
    second = _upload(client, _png(100, 100), "logo.png").json
    assert first["filename"] == "logo.png"
    assert second["filename"] == "logo-1.png"


def test_upload_rejects_bad_files(client, login):
    login(client)
    r = _upload(client, b"MZ...", "setup.exe")
    assert r.status_code == 400
    assert "Unsupported file type" in r.json["error"]

    r = _upload(client, b"not really a png", "fake.png")
    assert r.status_code == 400
    assert r.json["error"] == "File is not a valid image"

    r = client.post("/api/media/upload", data={}, content_type="multipart/form-data")
    assert r.status_code == 400


def test_viewer_cannot_upload(client, login):
    login(client, "viewer")
    r = _upload(client, _png(10, 10), "x.png")
    assert r.status_code == 403


def test_update_and_delete_media(client, login, app):
    login(client)
    media = _upload(client, _png(800, 600), "ward.png").json

    r = client.put(f"/api/media/{media['id']}", json={"alt_text": "Hospital ward", "url": "/hacked"})
    assert r.status_code == 200
    assert r.json["alt_text"] == "Hospital ward"
    assert r.json["url"] == media["url"]

    root = Path(app.config["UPLOAD_ROOT"])
    keys = [media["url"].removeprefix("/uploads/")] + [v["key"] for v in media["sizes"].values()]
    assert all((root / k).exists() for k in keys)

    r = client.delete(f"/api/media/{media['id']}")
    assert r.status_code == 200
    assert not any((root / k).exists() for k in keys)
    assert client.get(f"/api/media/{media['id']}").status_code == 404


def test_optimize_rebuilds_sizes(client, login):
    login(client)
    media = _upload(client, _png(500, 500), "scan.png").json
    r = client.post(f"/api/media/{media['id']}/optimize")
    assert r.status_code == 200
    assert "full_webp" in r.json["media"]["sizes"]

    svg = _upload(client, b'<svg xmlns="http://www.w3.org/2000/svg"/>', "logo.svg").json
    assert svg["sizes"] == {}
    assert client.post(f"/api/media/{svg['id']}/optimize").status_code == 400

    r = client.post("/api/media/optimize-all")
    assert r.status_code == 200
    assert r.json["processed"] == 0
    assert r.json["skipped"] == 2


def test_optimize_is_admin_only(client, login):
    login(client, "editor")
    media = _upload(client, _png(300, 300), "scan.png").json
    r = client.post(f"/api/media/{media['id']}/optimize")
    assert r.status_code == 403
    assert client.post("/api/media/optimize-all").status_code == 403


def test_media_search(client, login):
    login(client)
    _upload(client, _png(50, 50), "knee.png")
    _upload(client, _png(50, 50), "heart.png")
    r = client.get("/api/media?q=knee")
    assert [m["filename"] for m in r.json] == ["knee.png"]
