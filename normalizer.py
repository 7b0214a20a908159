"""normalizer.py - Turn the manuscript sources into the body of text.xhtml."""

import re
from pathlib import Path
from urllib.parse import unquote

from bs4 import BeautifulSoup

from asset_registry import is_inline_reference
from minifier import Minifier
from models import Project
from parsers import render_text
from parsers.base import title_case

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]
TOC_HEADING_TAG = "h1"


def _resolve(reference: str, base_dir: Path) -> Path:
    path = Path(unquote(reference))
    return path if path.is_absolute() else base_dir / path


def _normalize_source(
    project: Project, text_path: Path, minifier: Minifier, verbose: bool = False
) -> bytes:
    markup = minifier.minify("text/xml", render_text(text_path))
    soup = BeautifulSoup(markup, features="lxml")
    body = soup.body
    if body is None:
        return b""

    for tag in body.find_all(HEADING_TAGS):
        text = " ".join(tag.get_text().split())
        if project.should_capitalize_headings:
            text = title_case(text)
            tag.string = text
        if tag.name == TOC_HEADING_TAG:
            heading = project.add_heading(text)
            tag["id"] = heading.anchor

    # Image sources are relative to the manuscript file that references them
    base_dir = text_path.parent
    for img in body.find_all("img", src=True):
        if is_inline_reference(img["src"]):
            continue
        datum = project.registry.register(_resolve(img["src"], base_dir), verbose=verbose)
        img["src"] = datum.path

    return body.decode_contents().encode("utf-8")


def normalize(project: Project, minifier: Minifier, verbose: bool = False) -> None:
    """
    Render every text source, number its top-level headings, embed its images
    and store the combined body markup on project.text.

    Anchors keep counting across sources, so with several sources the TOC
    still reads bindery_text_heading_1..N in configuration order.
    """
    fragments = [
        _normalize_source(project, Path(text_path), minifier, verbose=verbose)
        for text_path in project.text_paths
    ]
    project.text = b"".join(fragments)


def register_extra_files(project: Project, verbose: bool = False) -> None:
    """Embed the files listed in the config even if nothing references them."""
    for file_path in project.extra_files:
        project.registry.register(file_path, verbose=verbose)


def snake_case(text: str) -> str:
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", text)
    text = re.sub(r"[\W_]+", "_", text)
    return text.strip("_").lower()


def compute_output_title(project: Project) -> None:
    project.output_title = snake_case(project.title) or "book"
