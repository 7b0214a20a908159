"""parsers/markdown_parser.py - Render Markdown manuscripts to XHTML."""

import re

import markdown

from parsers.base import decode_source

MARKDOWN_EXTENSIONS = ["extra", "sane_lists"]


def _strip_frontmatter(content: str) -> str:
    """Drop a leading YAML frontmatter block (--- delimited) if present."""
    m = re.match(r"^---\s*\n(.*?)\n---\s*\n", content, re.DOTALL)
    if not m:
        return content
    return content[m.end():]


def render_markdown(data: bytes) -> bytes:
    content = _strip_frontmatter(decode_source(data))
    html_text = markdown.markdown(
        content,
        extensions=MARKDOWN_EXTENSIONS,
        output_format="xhtml",
    )
    return html_text.encode("utf-8")
