"""config.py - Build a Project from the epub_info.json configuration file."""

import json
from pathlib import Path

from errors import ConfigError
from models import Project

DEFAULT_CONFIG_NAME = "epub_info.json"


def _optional_path(value, base_dir: Path) -> Path | None:
    if not value:
        return None
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def _path_list(value, base_dir: Path, field: str) -> list[Path]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ConfigError(f"'{field}' must be a path or a list of paths")
    return [_optional_path(v, base_dir) for v in value]


def _flag(data: dict, key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false, got {value!r}")
    return value


def project_from_dict(data: dict, base_dir: Path) -> Project:
    """
    Relative paths are resolved against base_dir (normally the directory the
    config file lives in). Unset cover/styles paths disable those features.
    """
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object")

    title = str(data.get("title") or "").strip()
    if not title:
        raise ConfigError("Configuration is missing 'title'")

    paths = data.get("paths") or {}
    if not isinstance(paths, dict):
        raise ConfigError("'paths' must be an object")

    text_paths = _path_list(paths.get("text"), base_dir, "paths.text")
    if not text_paths:
        raise ConfigError("Configuration is missing 'paths.text'")

    try:
        edition_number = int(data.get("edition_number") or 0)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'edition_number' must be an integer: {e}") from e

    return Project(
        title=title,
        text_paths=text_paths,
        isbn=str(data.get("isbn") or ""),
        author=str(data.get("author") or ""),
        edition_number=max(0, edition_number),
        language=str(data.get("language") or "en"),
        include_contents_page=_flag(data, "include_contents_page"),
        include_copyright_page=_flag(data, "include_copyright_page"),
        should_capitalize_headings=_flag(data, "should_capitalize_headings"),
        cover_image_path=_optional_path(paths.get("cover_image"), base_dir),
        styles_path=_optional_path(paths.get("styles"), base_dir),
        extra_files=_path_list(data.get("files"), base_dir, "files"),
    )


def load_project(config_path: Path) -> Project:
    config_path = Path(config_path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read configuration {config_path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e
    return project_from_dict(data, config_path.parent)
