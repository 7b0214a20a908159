"""cover.py - Decode the cover image and re-encode it as PNG for the archive."""

from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from errors import InputError
from models import Project


def load_cover(project: Project) -> None:
    if project.cover_image_path is None:
        return

    cover_path = Path(project.cover_image_path)
    try:
        with Image.open(cover_path) as img:
            img.load()
            project.cover_image_format = img.format or ""
            project.cover_image = img.copy()
    except FileNotFoundError as e:
        raise InputError(f"Cover image not found: {cover_path}") from e
    except (UnidentifiedImageError, OSError) as e:
        raise InputError(f"Cannot decode cover image {cover_path}: {e}") from e


def encode_png(image) -> bytes:
    output = BytesIO()
    if image.mode not in ("1", "L", "LA", "I", "P", "RGB", "RGBA"):
        image = image.convert("RGBA")
    image.save(output, "PNG", optimize=True)
    return output.getvalue()
