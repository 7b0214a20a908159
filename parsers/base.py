"""parsers/base.py - Shared parser utilities."""

from pathlib import Path

from errors import InputError


def read_source(file_path: Path) -> bytes:
    try:
        return Path(file_path).read_bytes()
    except OSError as e:
        raise InputError(f"Cannot read text source {file_path}: {e.strerror or e}") from e


def decode_source(data: bytes, file_path: Path | None = None) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        where = f" {file_path}" if file_path else ""
        raise InputError(f"Source{where} is not valid UTF-8: {e}") from e


def title_case(text: str) -> str:
    """Title-case that handles apostrophes correctly."""
    return " ".join(
        word[0].upper() + word[1:].lower() if word else ""
        for word in text.split()
    )
