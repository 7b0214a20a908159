import json
from pathlib import Path

import pytest
from PIL import Image

from models import Project

NCX_NS = "http://www.daisy.org/z3986/2005/ncx/"
OPF_NS = "http://www.idpf.org/2007/opf"
XHTML_NS = "http://www.w3.org/1999/xhtml"


def make_image(path: Path, size=(30, 20), color="red", fmt=None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, fmt)
    return path


def write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def project_factory(tmp_path):
    def _factory(text="# Hello\nWorld", text_name="book.md", **kwargs):
        text_path = write(tmp_path / text_name, text)
        kwargs.setdefault("title", "Hello World")
        kwargs.setdefault("isbn", "978-0-00-000000-0")
        return Project(text_paths=[text_path], **kwargs)
    return _factory


@pytest.fixture
def config_factory(tmp_path):
    def _factory(**overrides):
        data = {
            "isbn": "978-0-00-000000-0",
            "title": "Hello World",
            "paths": {"text": "book.md"},
        }
        data.update(overrides)
        config_path = tmp_path / "epub_info.json"
        config_path.write_text(json.dumps(data), encoding="utf-8")
        return config_path
    return _factory
