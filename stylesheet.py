"""stylesheet.py - Embed files referenced by url(...) in the stylesheet and minify it."""

import re
from pathlib import Path

from asset_registry import is_inline_reference
from errors import InputError
from minifier import Minifier
from models import Project

URL_RE = re.compile(r"""url\((["'])(\S*?)\1\)""")


def rewrite_urls(css: str, base_dir: Path, registry, verbose: bool = False) -> str:
    """
    Replace each quoted url(...) with the archive path of the registered file.
    data: URIs and #fragment references are left as written.
    """
    def _replace(m: re.Match) -> str:
        if is_inline_reference(m.group(2)):
            return m.group(0)
        reference = Path(m.group(2))
        if not reference.is_absolute():
            reference = base_dir / reference
        datum = registry.register(reference, verbose=verbose)
        return f'url("{datum.path}")'

    # RegistrationError propagates out of re.sub, so nothing is stored on failure
    return URL_RE.sub(_replace, css)


def rewrite_styles(project: Project, minifier: Minifier, verbose: bool = False) -> None:
    if project.styles_path is None:
        project.styles = b""
        return

    styles_path = Path(project.styles_path)
    try:
        css = styles_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Cannot read stylesheet {styles_path}: {e}") from e

    css = rewrite_urls(css, styles_path.parent, project.registry, verbose=verbose)
    project.styles = minifier.minify("text/css", css.encode("utf-8"))
