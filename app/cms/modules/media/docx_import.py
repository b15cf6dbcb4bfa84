"""
Word / text document to editor HTML.

Headings are shifted down one level (the public page owns its <h1>):
Title, Heading 1 and Heading 2 become <h2>; Heading 3-6 become <h3>.
Tables are wrapped for horizontal scrolling and empty paragraphs dropped.
"""
from __future__ import annotations

import io
import re
from dataclasses import dataclass, field
from typing import Callable

from docx import Document
from docx.oxml.ns import qn
from docx.table import Table
from docx.text.paragraph import Paragraph
from docx.text.run import Run
from markupsafe import escape

from app.cms.errors import ValidationError

# (image bytes, content type) -> public URL
ImageSaver = Callable[[bytes, str], str]

_IMAGE_EXT = {"image/png": "png", "image/gif": "gif", "image/jpeg": "jpg", "image/jpg": "jpg", "image/webp": "webp"}


@dataclass
class ImportResult:
    html: str
    image_count: int = 0
    messages: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"html": self.html, "imageCount": self.image_count, "messages": self.messages}


def image_extension(content_type: str) -> str | None:
    return _IMAGE_EXT.get((content_type or "").lower())


def _heading_tag(style_name: str) -> str | None:
    name = (style_name or "").strip().lower()
    if name == "title":
        return "h2"
    m = re.match(r"heading\s*(\d)$", name)
    if not m:
        return None
    return "h2" if int(m.group(1)) <= 2 else "h3"


def _list_tag(paragraph: Paragraph) -> str | None:
    name = (paragraph.style.name if paragraph.style is not None else "") or ""
    lowered = name.lower()
    if lowered.startswith("list number"):
        return "ol"
    if lowered.startswith("list bullet") or lowered == "list paragraph":
        return "ul"
    ppr = paragraph._p.pPr
    if ppr is not None and ppr.find(qn("w:numPr")) is not None:
        return "ul"
    return None


class _Converter:
    def __init__(self, document, save_image: ImageSaver | None) -> None:
        self.doc = document
        self.save_image = save_image
        self.image_count = 0
        self.messages: list[dict] = []

    def warn(self, message: str) -> None:
        self.messages.append({"type": "warning", "message": message})

    # runs

    def _run_images(self, run: Run) -> str:
        out = []
        for blip in run._r.iter(qn("a:blip")):
            rid = blip.get(qn("r:embed"))
            part = self.doc.part.related_parts.get(rid) if rid else None
            if part is None:
                continue
            content_type = getattr(part, "content_type", "")
            if self.save_image is None or image_extension(content_type) is None:
                self.warn(f"Skipped image of type {content_type or 'unknown'}")
                continue
            try:
                url = self.save_image(part.blob, content_type)
            except ValidationError as e:
                self.warn(f"Skipped image: {e.message}")
                continue
            self.image_count += 1
            out.append(f'<img src="{escape(url)}" alt="">')
        return "".join(out)

    def _run_html(self, run: Run) -> str:
        parts = []
        for child in run._r:
            if child.tag == qn("w:t"):
                parts.append(str(escape(child.text or "")))
            elif child.tag == qn("w:tab"):
                parts.append(" ")
            elif child.tag in (qn("w:br"), qn("w:cr")):
                parts.append("<br>")
        text = "".join(parts)
        if text.strip():
            if run.underline:
                text = f"<u>{text}</u>"
            if run.italic:
                text = f"<em>{text}</em>"
            if run.bold:
                text = f"<strong>{text}</strong>"
        return text + self._run_images(run)

    def paragraph_inner(self, paragraph: Paragraph) -> str:
        out = []
        for child in paragraph._p:
            if child.tag == qn("w:r"):
                out.append(self._run_html(Run(child, paragraph)))
            elif child.tag == qn("w:hyperlink"):
                inner = "".join(self._run_html(Run(r, paragraph)) for r in child.findall(qn("w:r")))
                rid = child.get(qn("r:id"))
                rel = self.doc.part.rels.get(rid) if rid else None
                if rel is not None and rel.is_external and inner:
                    out.append(f'<a href="{escape(rel.target_ref)}">{inner}</a>')
                else:
                    out.append(inner)
        return "".join(out)

    # blocks

    def table_html(self, table: Table) -> str:
        rows = []
        for row in table.rows:
            cells = []
            for cell in row.cells:
                inner = "<br>".join(filter(None, (self.paragraph_inner(p).strip() for p in cell.paragraphs)))
                cells.append(f"<td>{inner}</td>")
            rows.append(f"<tr>{''.join(cells)}</tr>")
        return f'<div class="table-wrap"><table class="content-table"><tbody>{"".join(rows)}</tbody></table></div>'

    def convert(self) -> str:
        html: list[str] = []
        open_list: str | None = None
        body = self.doc.element.body
        for child in body.iterchildren():
            if child.tag == qn("w:p"):
                paragraph = Paragraph(child, self.doc)
                inner = self.paragraph_inner(paragraph).strip()
                list_tag = _list_tag(paragraph)
                if open_list and list_tag != open_list:
                    html.append(f"</{open_list}>")
                    open_list = None
                if not _visible(inner):
                    continue
                if list_tag:
                    if open_list is None:
                        html.append(f"<{list_tag}>")
                        open_list = list_tag
                    html.append(f"<li>{inner}</li>")
                    continue
                style_name = paragraph.style.name if paragraph.style is not None else ""
                tag = _heading_tag(style_name) or "p"
                html.append(f"<{tag}>{inner}</{tag}>")
            elif child.tag == qn("w:tbl"):
                if open_list:
                    html.append(f"</{open_list}>")
                    open_list = None
                html.append(self.table_html(Table(child, self.doc)))
        if open_list:
            html.append(f"</{open_list}>")
        return _collapse_breaks("\n".join(html))


def _visible(inner: str) -> bool:
    if "<img" in inner:
        return True
    text = re.sub(r"<[^>]+>", "", inner).replace("&nbsp;", "").replace("\xa0", "")
    return bool(text.strip())


def _collapse_breaks(html: str) -> str:
    return re.sub(r"(<br\s*/?>\s*){3,}", "<br>", html, flags=re.I)


def docx_to_html(data: bytes, save_image: ImageSaver | None = None) -> ImportResult:
    conv = _Converter(Document(io.BytesIO(data)), save_image)
    html = conv.convert()
    return ImportResult(html=html, image_count=conv.image_count, messages=conv.messages)


def docx_to_text(data: bytes) -> str:
    """Plain text: one line per paragraph, table cells separated by tabs."""
    doc = Document(io.BytesIO(data))
    lines = []
    for child in doc.element.body.iterchildren():
        if child.tag == qn("w:p"):
            lines.append(Paragraph(child, doc).text)
        elif child.tag == qn("w:tbl"):
            for row in Table(child, doc).rows:
                lines.append("\t".join(cell.text for cell in row.cells))
    return "\n".join(lines).strip()


_MD_INLINE = (
    (re.compile(r"\*\*(.+?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"(?<!\*)\*(?!\*)(.+?)(?<!\*)\*(?!\*)"), r"<em>\1</em>"),
    (re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)"), r'<a href="\2">\1</a>'),
)


def _md_inline(text: str) -> str:
    out = str(escape(text))
    for pattern, repl in _MD_INLINE:
        out = pattern.sub(repl, out)
    return out


def text_to_html(text: str, *, markdown: bool = False) -> str:
    """Blank-line separated paragraphs; with markdown=True also #-headings and -/1. lists."""
    html: list[str] = []
    open_list: str | None = None
    para: list[str] = []

    def flush_para() -> None:
        if para:
            html.append("<p>" + "<br>".join(para) + "</p>")
            para.clear()

    def close_list() -> None:
        nonlocal open_list
        if open_list:
            html.append(f"</{open_list}>")
            open_list = None

    for raw in text.replace("\r\n", "\n").split("\n"):
        line = raw.strip()
        if not line:
            flush_para()
            close_list()
            continue
        if markdown:
            heading = re.match(r"^(#{1,6})\s+(.*)$", line)
            bullet = re.match(r"^[-*+]\s+(.*)$", line)
            numbered = re.match(r"^\d+[.)]\s+(.*)$", line)
            if heading:
                flush_para()
                close_list()
                tag = "h2" if len(heading.group(1)) <= 2 else "h3"
                html.append(f"<{tag}>{_md_inline(heading.group(2))}</{tag}>")
                continue
            if bullet or numbered:
                flush_para()
                tag = "ul" if bullet else "ol"
                if open_list != tag:
                    close_list()
                    html.append(f"<{tag}>")
                    open_list = tag
                html.append(f"<li>{_md_inline((bullet or numbered).group(1))}</li>")
                continue
            close_list()
            para.append(_md_inline(line))
        else:
            para.append(str(escape(line)))
    flush_para()
    close_list()
    return "\n".join(html)
