"""asset_registry.py - Content-addressed store for files embedded in the EPUB."""

import hashlib
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from errors import RegistrationError

FALLBACK_MIME_TYPE = "application/octet-stream"
FILES_DIR = "files"

# References that point inside the document or carry their own bytes
INLINE_REFERENCE_PREFIXES = ("data:", "#")


@dataclass(frozen=True)
class AssetDatum:
    hash: str        # sha256 hex digest of content
    extension: str   # e.g. ".png", kept exactly as it appeared in the source path
    path: str        # archive path, "files/<hash><extension>"
    mime_type: str
    content: bytes
    item_id: str     # OPF manifest id, "file_<n>"


def mime_type_for_extension(extension: str) -> str:
    mime_type, _ = mimetypes.guess_type(f"asset{extension.lower()}")
    return mime_type or FALLBACK_MIME_TYPE


def is_inline_reference(reference: str) -> bool:
    return reference.strip().lower().startswith(INLINE_REFERENCE_PREFIXES)


class AssetRegistry:
    """
    Append-only list of embedded files, keyed by (content hash, extension).
    Registering identical bytes twice under the same extension returns the
    first entry, so every distinct file is written to the archive once.
    """

    def __init__(self):
        self._data: list[AssetDatum] = []
        self._by_key: dict[tuple[str, str], AssetDatum] = {}

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def register(self, path: Path, verbose: bool = False) -> AssetDatum:
        path = Path(path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise RegistrationError(path, e.strerror or str(e)) from e

        extension = path.suffix
        digest = hashlib.sha256(content).hexdigest()

        existing = self._by_key.get((digest, extension))
        if existing is not None:
            return existing

        datum = AssetDatum(
            hash=digest,
            extension=extension,
            path=f"{FILES_DIR}/{digest}{extension}",
            mime_type=mime_type_for_extension(extension),
            content=content,
            item_id=f"file_{len(self._data) + 1}",
        )
        self._data.append(datum)
        self._by_key[(digest, extension)] = datum
        if verbose:
            print(f"  Registered {datum.path} ({path})")
        return datum
