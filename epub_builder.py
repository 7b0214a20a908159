"""epub_builder.py - Assemble the normalized project into an EPUB 2 archive."""

import html
import os
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from tqdm import tqdm

from cover import encode_png
from errors import AssemblyError
from models import Project

MIMETYPE = "application/epub+zip"
XHTML_MEDIA_TYPE = "application/xhtml+xml"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>'

COPYRIGHT_DISCLAIMER = (
    "While every precaution has been taken in the preparation of this book, "
    "the publisher assumes no responsibility for errors or omissions, or for "
    "damages resulting from the use of the information contained herein."
)


@dataclass
class Page:
    id: str
    href: str
    label: str


@dataclass
class NavPoint:
    id: str
    label: str
    src: str
    play_order: int


def _esc(text: str) -> str:
    return html.escape(text, quote=True)


def ordinal(n: int) -> str:
    """1 -> '1st', 2 -> '2nd', 11 -> '11th', 23 -> '23rd'."""
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def spine_pages(project: Project) -> list[Page]:
    """Reading order; cover, copyright and contents are present only when enabled."""
    pages = []
    if project.cover_image is not None:
        pages.append(Page("cover_page", "cover.xhtml", "Cover"))
    pages.append(Page("title_page", "title.xhtml", "Title"))
    if project.include_copyright_page:
        pages.append(Page("copyright_page", "copyright.xhtml", "Copyright"))
    if project.include_contents_page:
        pages.append(Page("contents_page", "contents.xhtml", "Contents"))
    pages.append(Page("text_page", "text.xhtml", "Text"))
    return pages


def build_nav_points(project: Project) -> list[NavPoint]:
    """
    Nav points in spine order. The text page is replaced by one point per
    heading when headings were found. playOrder runs 1..N without gaps.
    """
    entries = []
    for page in spine_pages(project):
        if page.id == "text_page" and project.headings:
            for heading in project.headings:
                entries.append((
                    f"text_page_{heading.anchor}",
                    heading.text,
                    f"text.xhtml#{heading.anchor}",
                ))
        else:
            entries.append((page.id, page.label, page.href))

    return [
        NavPoint(id=nav_id, label=label, src=src, play_order=i)
        for i, (nav_id, label, src) in enumerate(entries, start=1)
    ]


# --- XML documents ---

def xhtml_page(project: Project, page_title: str, body: str, head_extra: str = "") -> str:
    return (
        f"{XML_DECLARATION}"
        f'<html xmlns="http://www.w3.org/1999/xhtml" xml:lang="{_esc(project.language)}">'
        "<head>"
        f"<title>{_esc(page_title)}</title>"
        '<link rel="stylesheet" type="text/css" href="styles.css" />'
        f"{head_extra}"
        "</head>"
        f"<body>{body}</body>"
        "</html>"
    )


def container_xml() -> str:
    return (
        f"{XML_DECLARATION}"
        '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">'
        "<rootfiles>"
        '<rootfile full-path="content.opf" media-type="application/oebps-package+xml" />'
        "</rootfiles>"
        "</container>"
    )


def cover_page_xhtml(project: Project) -> str:
    width, height = project.cover_image.size
    head = (
        '<style type="text/css">'
        "@page{padding:0pt !important;margin:0pt !important;}"
        "body{text-align:center !important;padding:0pt !important;margin:0pt !important;}"
        "</style>"
    )
    body = (
        "<div>"
        '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
        f'version="1.1" width="100%" height="100%" viewBox="0 0 {width} {height}" '
        'preserveAspectRatio="none">'
        f'<image width="{width}" height="{height}" xlink:href="cover.png" />'
        "</svg>"
        "</div>"
    )
    return xhtml_page(project, "Cover", body, head_extra=head)


def title_page_xhtml(project: Project) -> str:
    body = '<div class="title_area">'
    body += f'<h1 class="title">{_esc(project.title)}</h1>'
    if project.author:
        body += f'<h2 class="author">{_esc(project.author)}</h2>'
    body += "</div>"
    return xhtml_page(project, "Title", body)


def copyright_page_xhtml(project: Project, year: int | None = None) -> str:
    if year is None:
        year = datetime.now(timezone.utc).year

    notice = f"Copyright © {year}"
    if project.author:
        notice += f" {_esc(project.author)}"
    notice += "."

    edition = ""
    if project.edition_number > 0:
        edition = f', <span class="edition">{ordinal(project.edition_number)} Edition</span>.'

    body = (
        '<div class="copyright_page">'
        f'<p class="disclaimer">{COPYRIGHT_DISCLAIMER}</p>'
        f'<p class="notice">{notice}</p>'
        '<p class="title_and_edition">'
        f'<em class="title">{_esc(project.title)}</em>{edition}'
        "</p>"
        "</div>"
    )
    return xhtml_page(project, "Copyright", body)


def contents_page_xhtml(project: Project) -> str:
    items = ['<li><a href="title.xhtml">Title</a></li>']
    if project.include_copyright_page:
        items.append('<li><a href="copyright.xhtml">Copyright</a></li>')
    if project.headings:
        for heading in project.headings:
            items.append(
                f'<li><a href="text.xhtml#{heading.anchor}">{_esc(heading.text)}</a></li>'
            )
    else:
        items.append('<li><a href="text.xhtml">Text</a></li>')

    body = (
        '<div class="contents_page">'
        "<h1>Contents</h1>"
        f"<ol>{''.join(items)}</ol>"
        "</div>"
    )
    return xhtml_page(project, "Contents", body)


def text_page_xhtml(project: Project) -> str:
    body = f'<div class="text_page">{project.text.decode("utf-8")}</div>'
    return xhtml_page(project, "Text", body)


def package_opf(project: Project) -> str:
    metadata = (
        "<metadata "
        'xmlns:opf="http://www.idpf.org/2007/opf" '
        'xmlns:dc="http://purl.org/dc/elements/1.1/">'
        f"<dc:language>{_esc(project.language)}</dc:language>"
        f"<dc:title>{_esc(project.title)}</dc:title>"
    )
    if project.author:
        metadata += f'<dc:creator opf:role="aut">{_esc(project.author)}</dc:creator>'
    metadata += f'<dc:identifier id="unique-id">{_esc(project.isbn)}</dc:identifier>'
    if project.cover_image is not None:
        metadata += '<meta name="cover" content="cover_image" />'
    metadata += "</metadata>"

    manifest_items = ['<item id="styles" href="styles.css" media-type="text/css" />']
    if project.cover_image is not None:
        manifest_items.append('<item id="cover_image" href="cover.png" media-type="image/png" />')
    pages = spine_pages(project)
    for page in pages:
        manifest_items.append(
            f'<item id="{page.id}" href="{page.href}" media-type="{XHTML_MEDIA_TYPE}" />'
        )
    for datum in project.registry:
        manifest_items.append(
            f'<item id="{datum.item_id}" href="{_esc(datum.path)}" media-type="{_esc(datum.mime_type)}" />'
        )
    manifest_items.append('<item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml" />')

    spine = "".join(f'<itemref idref="{page.id}" />' for page in pages)

    guide = ""
    if project.cover_image is not None:
        guide = '<guide><reference type="cover" href="cover.xhtml" title="Cover" /></guide>'

    return (
        f"{XML_DECLARATION}"
        '<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="unique-id">'
        f"{metadata}"
        f"<manifest>{''.join(manifest_items)}</manifest>"
        f'<spine toc="ncx">{spine}</spine>'
        f"{guide}"
        "</package>"
    )


def toc_ncx(project: Project) -> str:
    nav_points = "".join(
        f'<navPoint id="{_esc(point.id)}" playOrder="{point.play_order}">'
        f"<navLabel><text>{_esc(point.label)}</text></navLabel>"
        f'<content src="{_esc(point.src)}" />'
        "</navPoint>"
        for point in build_nav_points(project)
    )
    return (
        f"{XML_DECLARATION}"
        '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1" '
        f'xml:lang="{_esc(project.language)}">'
        "<head>"
        f'<meta name="dtb:uid" content="{_esc(project.isbn)}" />'
        '<meta name="dtb:depth" content="1" />'
        '<meta name="dtb:totalPageCount" content="0" />'
        '<meta name="dtb:maxPageNumber" content="0" />'
        "</head>"
        f"<docTitle><text>{_esc(project.title)}</text></docTitle>"
        f"<navMap>{nav_points}</navMap>"
        "</ncx>"
    )


# --- Archive steps, run in order by build_epub ---

def write_mimetype(project: Project, archive: zipfile.ZipFile) -> None:
    # Must be the first entry and uncompressed for readers to sniff the format
    archive.writestr("mimetype", MIMETYPE, compress_type=zipfile.ZIP_STORED)


def write_container(project: Project, archive: zipfile.ZipFile) -> None:
    archive.writestr("META-INF/container.xml", container_xml())


def write_styles(project: Project, archive: zipfile.ZipFile) -> None:
    archive.writestr("styles.css", project.styles)


def write_cover_image(project: Project, archive: zipfile.ZipFile) -> None:
    if project.cover_image is None:
        return
    archive.writestr("cover.png", encode_png(project.cover_image))


def write_cover_page(project: Project, archive: zipfile.ZipFile) -> None:
    if project.cover_image is None:
        return
    archive.writestr("cover.xhtml", cover_page_xhtml(project))


def write_title_page(project: Project, archive: zipfile.ZipFile) -> None:
    archive.writestr("title.xhtml", title_page_xhtml(project))


def write_copyright_page(project: Project, archive: zipfile.ZipFile) -> None:
    if not project.include_copyright_page:
        return
    archive.writestr("copyright.xhtml", copyright_page_xhtml(project))


def write_contents_page(project: Project, archive: zipfile.ZipFile) -> None:
    if not project.include_contents_page:
        return
    archive.writestr("contents.xhtml", contents_page_xhtml(project))


def write_text_page(project: Project, archive: zipfile.ZipFile) -> None:
    archive.writestr("text.xhtml", text_page_xhtml(project))


def write_files(project: Project, archive: zipfile.ZipFile) -> None:
    for datum in project.registry:
        archive.writestr(datum.path, datum.content)


def write_package_opf(project: Project, archive: zipfile.ZipFile) -> None:
    archive.writestr("content.opf", package_opf(project))


def write_toc_ncx(project: Project, archive: zipfile.ZipFile) -> None:
    archive.writestr("toc.ncx", toc_ncx(project))


ARCHIVE_STEPS = [
    ("mimetype", write_mimetype),
    ("container", write_container),
    ("styles", write_styles),
    ("cover image", write_cover_image),
    ("cover page", write_cover_page),
    ("title page", write_title_page),
    ("copyright page", write_copyright_page),
    ("contents page", write_contents_page),
    ("text page", write_text_page),
    ("files", write_files),
    ("package", write_package_opf),
    ("ncx", write_toc_ncx),
]


def build_epub(project: Project, output_dir: Path, quiet: bool = False) -> Path:
    """
    Write <output_title>.zip step by step, then rename it to .epub.
    On any failure the temporary zip is removed and no .epub is produced.
    """
    output_dir = Path(output_dir)
    zip_path = output_dir / f"{project.output_title}.zip"
    epub_path = zip_path.with_suffix(".epub")

    step_name = "setup"
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            with tqdm(total=len(ARCHIVE_STEPS), desc="  Writing EPUB", unit="step", disable=quiet) as pbar:
                for step_name, step in ARCHIVE_STEPS:
                    step(project, archive)
                    pbar.update(1)
        step_name = "rename"
        os.replace(zip_path, epub_path)
    except (OSError, ValueError, zipfile.LargeZipFile) as e:
        raise AssemblyError(f"Failed to write {epub_path} ({step_name}): {e}") from e
    finally:
        zip_path.unlink(missing_ok=True)

    return epub_path
