"""minifier.py - Whitespace/comment minification for the XML and CSS that go into the archive."""

import re

XML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
XML_PRE_RE = re.compile(r"(<pre\b.*?</pre>)", re.DOTALL | re.IGNORECASE)

# Whitespace next to these tags is layout, not text
BLOCK_TAGS = (
    "html|head|body|title|meta|link|style|div|p|h[1-6]|ul|ol|li|dl|dt|dd|"
    "blockquote|pre|hr|table|caption|colgroup|col|thead|tbody|tfoot|tr|th|td|"
    "section|article|aside|header|footer|nav|figure|figcaption"
)
XML_SPACE_BEFORE_BLOCK_RE = re.compile(rf"\s+(?=</?(?:{BLOCK_TAGS})\b)", re.IGNORECASE)
XML_SPACE_AFTER_BLOCK_RE = re.compile(rf"(</?(?:{BLOCK_TAGS})\b[^>]*>)\s+", re.IGNORECASE)

CSS_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
CSS_STRING_RE = re.compile(r"""("(?:[^"\\\n]|\\.)*"|'(?:[^'\\\n]|\\.)*')""")
CSS_PUNCTUATION_RE = re.compile(r"\s*([{};,>])\s*")
CSS_COLON_RE = re.compile(r":\s+")


def minify_xml(text: str) -> str:
    """
    Drop comments and the whitespace around block-level tags, and collapse
    other whitespace runs to one space, so words split across lines between
    inline elements stay separated. <pre> blocks are copied through untouched.
    """
    parts = XML_PRE_RE.split(text)
    out = []
    for i, part in enumerate(parts):
        if i % 2:
            out.append(part)
            continue
        part = XML_COMMENT_RE.sub("", part)
        part = XML_SPACE_BEFORE_BLOCK_RE.sub("", part)
        part = XML_SPACE_AFTER_BLOCK_RE.sub(r"\1", part)
        part = re.sub(r"\s+", " ", part)
        out.append(part)
    return "".join(out).strip()


def _minify_css_code(text: str) -> str:
    text = re.sub(r"\s+", " ", text)
    text = CSS_PUNCTUATION_RE.sub(r"\1", text)
    text = CSS_COLON_RE.sub(":", text)
    return text.replace(";}", "}")


def minify_css(text: str) -> str:
    """Minify everything outside quoted strings; string literals are kept verbatim."""
    text = CSS_COMMENT_RE.sub("", text)
    parts = CSS_STRING_RE.split(text)
    out = [part if i % 2 else _minify_css_code(part) for i, part in enumerate(parts)]
    return "".join(out).strip()


class Minifier:
    """Dispatches minify(mime_type, data) to the function registered for that type."""

    def __init__(self):
        self._funcs = {}
        self.add_func("text/xml", minify_xml)
        self.add_func("text/css", minify_css)

    def add_func(self, mime_type: str, func) -> None:
        self._funcs[mime_type] = func

    def minify(self, mime_type: str, data: bytes) -> bytes:
        func = self._funcs.get(mime_type)
        if func is None:
            raise ValueError(f"No minifier registered for '{mime_type}'")
        return func(data.decode("utf-8")).encode("utf-8")
