"""parsers/ - Render a manuscript source into body-fragment XHTML."""

from pathlib import Path

from errors import UnrecognizedTextExtensionError
from parsers.base import read_source

MARKDOWN_EXTENSIONS = {".md", ".markdown"}
HTML_EXTENSIONS = {".html", ".xhtml", ".htm"}
SUPPORTED_EXTENSIONS = MARKDOWN_EXTENSIONS | HTML_EXTENSIONS


def render_text(file_path: Path) -> bytes:
    """Dispatch to the appropriate renderer based on file extension."""
    file_path = Path(file_path)
    suffix = file_path.suffix.lower()

    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnrecognizedTextExtensionError(file_path)

    data = read_source(file_path)
    if suffix in MARKDOWN_EXTENSIONS:
        from parsers.markdown_parser import render_markdown
        return render_markdown(data)
    else:
        from parsers.html_parser import extract_body
        return extract_body(data)
