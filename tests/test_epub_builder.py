import zipfile

import pytest
from lxml import etree
from PIL import Image

import epub_builder
from epub_builder import (
    build_epub,
    build_nav_points,
    contents_page_xhtml,
    copyright_page_xhtml,
    ordinal,
    package_opf,
    spine_pages,
    title_page_xhtml,
    toc_ncx,
)
from errors import AssemblyError
from models import Project

from conftest import NCX_NS, OPF_NS, make_image


def _project(tmp_path, **kwargs):
    kwargs.setdefault("title", "Hello World")
    kwargs.setdefault("isbn", "isbn-1")
    project = Project(text_paths=[tmp_path / "book.md"], **kwargs)
    project.output_title = "hello_world"
    return project


def _with_headings(project, *texts):
    for text in texts:
        project.add_heading(text)
    return project


def test_ordinal():
    assert [ordinal(n) for n in (1, 2, 3, 4, 11, 12, 13, 21, 22, 101, 111)] == [
        "1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd", "101st", "111th",
    ]


def test_spine_order_with_everything(tmp_path):
    project = _project(tmp_path, include_copyright_page=True, include_contents_page=True)
    project.cover_image = Image.new("RGB", (10, 10))

    assert [p.id for p in spine_pages(project)] == [
        "cover_page", "title_page", "copyright_page", "contents_page", "text_page",
    ]


def test_nav_points_replace_text_with_headings(tmp_path):
    project = _with_headings(_project(tmp_path, include_contents_page=True), "One", "Two")
    points = build_nav_points(project)

    assert [(p.id, p.play_order) for p in points] == [
        ("title_page", 1),
        ("contents_page", 2),
        ("text_page_bindery_text_heading_1", 3),
        ("text_page_bindery_text_heading_2", 4),
    ]
    assert points[2].src == "text.xhtml#bindery_text_heading_1"
    assert points[3].label == "Two"


def test_nav_points_without_headings_point_at_text(tmp_path):
    points = build_nav_points(_project(tmp_path))
    assert [(p.id, p.src, p.play_order) for p in points] == [
        ("title_page", "title.xhtml", 1),
        ("text_page", "text.xhtml", 2),
    ]


def test_toc_play_order_is_contiguous(tmp_path):
    project = _with_headings(
        _project(tmp_path, include_copyright_page=True, include_contents_page=True),
        "A", "B", "C",
    )
    project.cover_image = Image.new("RGB", (10, 10))
    root = etree.fromstring(toc_ncx(project).encode("utf-8"))

    orders = [int(p.get("playOrder")) for p in root.iter(f"{{{NCX_NS}}}navPoint")]
    assert orders == list(range(1, 8))


def test_conditional_composition_without_copyright(tmp_path):
    project = _with_headings(
        _project(tmp_path, include_copyright_page=False, include_contents_page=True), "Chapter",
    )
    opf = package_opf(project)
    ncx = toc_ncx(project)
    contents = contents_page_xhtml(project)

    for document in (opf, ncx, contents):
        assert "copyright" not in document
    assert 'idref="contents_page"' in opf
    assert 'idref="title_page"' in opf
    assert 'idref="text_page"' in opf
    assert 'src="contents.xhtml"' in ncx
    assert 'href="title.xhtml"' in contents
    assert 'href="text.xhtml#bindery_text_heading_1"' in contents


def test_contents_without_headings_links_text_page(tmp_path):
    contents = contents_page_xhtml(_project(tmp_path, include_copyright_page=True))
    assert '<li><a href="copyright.xhtml">Copyright</a></li>' in contents
    assert '<li><a href="text.xhtml">Text</a></li>' in contents


def test_copyright_page(tmp_path):
    project = _project(tmp_path, author="A. Writer", edition_number=2)
    page = copyright_page_xhtml(project, year=2024)

    assert "Copyright © 2024 A. Writer." in page
    assert '<span class="edition">2nd Edition</span>' in page
    assert '<em class="title">Hello World</em>' in page
    etree.fromstring(page.encode("utf-8"))


def test_copyright_page_without_author_or_edition(tmp_path):
    page = copyright_page_xhtml(_project(tmp_path), year=2024)
    assert "Copyright © 2024." in page
    assert "Edition" not in page


def test_title_page_escapes_metadata(tmp_path):
    page = title_page_xhtml(_project(tmp_path, title="Cats & Dogs", author="<Anon>"))

    assert '<h1 class="title">Cats &amp; Dogs</h1>' in page
    assert '<h2 class="author">&lt;Anon&gt;</h2>' in page
    etree.fromstring(page.encode("utf-8"))


def test_opf_lists_registered_files(tmp_path):
    project = _project(tmp_path, author="A. Writer")
    datum = project.registry.register(make_image(tmp_path / "pic.png"))
    root = etree.fromstring(package_opf(project).encode("utf-8"))

    items = {i.get("id"): i for i in root.iter(f"{{{OPF_NS}}}item")}
    assert items["file_1"].get("href") == datum.path
    assert items["file_1"].get("media-type") == "image/png"
    assert set(items) == {"styles", "title_page", "text_page", "file_1", "ncx"}
    assert root.find(f"{{{OPF_NS}}}guide") is None


def test_opf_cover_guide(tmp_path):
    project = _project(tmp_path)
    project.cover_image = Image.new("RGB", (10, 10))
    opf = package_opf(project)

    assert '<item id="cover_image" href="cover.png" media-type="image/png" />' in opf
    assert '<reference type="cover" href="cover.xhtml" title="Cover" />' in opf
    assert opf.index('idref="cover_page"') < opf.index('idref="title_page"')


def test_build_epub_writes_archive_in_order(tmp_path):
    project = _project(tmp_path, include_copyright_page=True, include_contents_page=True)
    project.cover_image = Image.new("RGB", (40, 60), "blue")
    project.text = b"<p>Body</p>"
    project.styles = b"p{margin:0}"
    project.registry.register(make_image(tmp_path / "pic.png"))

    epub_path = build_epub(project, tmp_path / "out", quiet=True)

    assert epub_path == tmp_path / "out" / "hello_world.epub"
    assert not (tmp_path / "out" / "hello_world.zip").exists()
    with zipfile.ZipFile(epub_path) as archive:
        names = archive.namelist()
        assert names[:9] == [
            "mimetype",
            "META-INF/container.xml",
            "styles.css",
            "cover.png",
            "cover.xhtml",
            "title.xhtml",
            "copyright.xhtml",
            "contents.xhtml",
            "text.xhtml",
        ]
        assert names[9].startswith("files/")
        assert names[10:] == ["content.opf", "toc.ncx"]

        first = archive.infolist()[0]
        assert first.compress_type == zipfile.ZIP_STORED
        assert archive.read("mimetype") == b"application/epub+zip"
        assert archive.read("styles.css") == b"p{margin:0}"

        cover_xhtml = archive.read("cover.xhtml").decode("utf-8")
        assert 'viewBox="0 0 40 60"' in cover_xhtml
        with archive.open("cover.png") as f:
            with Image.open(f) as cover:
                assert cover.format == "PNG"
                assert cover.size == (40, 60)

        for name in names:
            if name.endswith((".xhtml", ".xml", ".opf", ".ncx")):
                etree.fromstring(archive.read(name))


def test_failed_step_leaves_no_archive(tmp_path, monkeypatch):
    def broken(project, archive):
        raise OSError("disk full")

    monkeypatch.setattr(
        epub_builder, "ARCHIVE_STEPS", epub_builder.ARCHIVE_STEPS[:3] + [("broken", broken)],
    )
    out = tmp_path / "out"

    with pytest.raises(AssemblyError, match="broken"):
        build_epub(_project(tmp_path), out, quiet=True)

    assert list(out.iterdir()) == []
