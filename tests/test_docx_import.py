import io

from docx import Document
from docx.shared import Inches
from PIL import Image

from app.cms.errors import ValidationError
from app.cms.modules.media.docx_import import docx_to_html, docx_to_text, text_to_html


def _docx(with_image: bool = False) -> bytes:
    doc = Document()
    doc.add_heading("Knee Replacement Guide", level=1)
    doc.add_heading("Recovery", level=3)
    p = doc.add_paragraph("Most patients ")
    p.add_run("walk").bold = True
    p.add_run(" within ")
    p.add_run("two days").italic = True
    doc.add_paragraph("")
    doc.add_paragraph("Bring your reports", style="List Bullet")
    doc.add_paragraph("Book a follow-up", style="List Bullet")
    doc.add_paragraph("Consultation", style="List Number")
    table = doc.add_table(rows=2, cols=2)
    table.cell(0, 0).text = "City"
    table.cell(0, 1).text = "Cost"
    table.cell(1, 0).text = "Chennai"
    table.cell(1, 1).text = "$5,000"
    if with_image:
        img = io.BytesIO()
        Image.new("RGB", (40, 30), (0, 128, 0)).save(img, "PNG")
        img.seek(0)
        doc.add_picture(img, width=Inches(1))
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def test_docx_to_html_structure():
    result = docx_to_html(_docx())
    html = result.html
    assert "<h2>Knee Replacement Guide</h2>" in html
    assert "<h3>Recovery</h3>" in html
    assert "<p>Most patients <strong>walk</strong> within <em>two days</em></p>" in html
    assert "<ul>\n<li>Bring your reports</li>\n<li>Book a follow-up</li>\n</ul>" in html
    assert "<ol>\n<li>Consultation</li>\n</ol>" in html
    assert '<table class="content-table">' in html
    assert "<td>Chennai</td><td>$5,000</td>" in html
    assert "<p></p>" not in html
    assert result.image_count == 0


def test_docx_images_go_through_callback():
    saved = []

    def save_image(blob: bytes, content_type: str) -> str:
        saved.append(content_type)
        return f"/uploads/docx-{len(saved)}.png"

    result = docx_to_html(_docx(with_image=True), save_image)
    assert saved == ["image/png"]
    assert result.image_count == 1
    assert '<img src="/uploads/docx-1.png" alt="">' in result.html


def test_docx_images_skipped_without_callback():
    result = docx_to_html(_docx(with_image=True))
    assert result.image_count == 0
    assert result.messages and result.messages[0]["type"] == "warning"


def test_docx_image_rejected_by_library_is_skipped():
    def save(blob, content_type):
        raise ValidationError("File is not a valid image")

    result = docx_to_html(_docx(with_image=True), save)
    assert result.image_count == 0
    assert "<img" not in result.html
    assert "<h2>Knee Replacement Guide</h2>" in result.html
    assert {"type": "warning", "message": "Skipped image: File is not a valid image"} in result.messages


def test_docx_to_text_keeps_table_cells():
    text = docx_to_text(_docx())
    assert text.startswith("Knee Replacement Guide")
    assert "Chennai\t$5,000" in text


def test_text_to_html_plain_escapes():
    html = text_to_html("Line <one>\nline two\n\nSecond para")
    assert html == "<p>Line &lt;one&gt;<br>line two</p>\n<p>Second para</p>"


def test_text_to_html_markdown():
    html = text_to_html("# Title\n\nSome **bold** and *soft* text\n\n- a\n- b\n\n1. first", markdown=True)
    assert "<h2>Title</h2>" in html
    assert "<strong>bold</strong>" in html
    assert "<em>soft</em>" in html
    assert "<ul>\n<li>a</li>\n<li>b</li>\n</ul>" in html
    assert "<ol>\n<li>first</li>\n</ol>" in html


def _post_file(client, url, data: bytes, name: str):
    return client.post(url, data={"file": (io.BytesIO(data), name)}, content_type="multipart/form-data")


def test_import_endpoint_saves_images_to_library(client, login):
    login(client)
    r = _post_file(client, "/api/import/docx", _docx(with_image=True), "Guide.docx")
    assert r.status_code == 200
    assert r.json["imageCount"] == 1
    assert "<h2>Knee Replacement Guide</h2>" in r.json["html"]

    media = client.get("/api/media").json
    assert len(media) == 1
    assert media[0]["filename"] == "docx-import-guide-1.png"
    assert media[0]["url"] in r.json["html"]


def test_import_endpoint_skips_oversized_images(client, login, monkeypatch):
    login(client)
    monkeypatch.setattr("app.cms.modules.media.service.MAX_MEDIA_BYTES", 16)
    r = _post_file(client, "/api/import/docx", _docx(with_image=True), "Guide.docx")
    assert r.status_code == 200
    assert r.json["imageCount"] == 0
    assert any("File too large" in m["message"] for m in r.json["messages"])
    assert client.get("/api/media").json == []


def test_import_endpoint_rejects_bad_documents(client, login):
    login(client)
    r = _post_file(client, "/api/import/docx", b"plain bytes", "notes.pdf")
    assert r.status_code == 400
    r = _post_file(client, "/api/import/docx", b"not a zip", "broken.docx")
    assert r.status_code == 400
    assert "valid .docx" in r.json["error"]


def test_import_markdown_and_text(client, login):
    login(client)
    r = _post_file(client, "/api/import/docx", b"## Heading\n\n- item", "notes.md")
    assert r.json["html"] == "<h2>Heading</h2>\n<ul>\n<li>item</li>\n</ul>"

    r = _post_file(client, "/api/import/docx-text", _docx(), "Guide.docx")
    assert r.status_code == 200
    assert "Knee Replacement Guide" in r.json["text"]


def test_viewer_cannot_import(client, login):
    login(client, "viewer")
    r = _post_file(client, "/api/import/docx", _docx(), "Guide.docx")
    assert r.status_code == 403
