"""models.py - Shared data types for bindery."""

from dataclasses import dataclass, field
from pathlib import Path

from asset_registry import AssetRegistry

HEADING_ANCHOR_PREFIX = "bindery_text_heading_"


@dataclass
class Heading:
    text: str        # Display text, after optional title-casing
    index: int       # 1-based, in document order

    @property
    def anchor(self) -> str:
        return f"{HEADING_ANCHOR_PREFIX}{self.index}"


@dataclass
class Project:
    """Everything needed to build one EPUB, plus what the stages derive from it."""
    title: str
    text_paths: list[Path]
    isbn: str = ""
    author: str = ""
    edition_number: int = 0         # 0 = unspecified
    language: str = "en"
    include_contents_page: bool = False
    include_copyright_page: bool = False
    should_capitalize_headings: bool = False
    cover_image_path: Path | None = None
    styles_path: Path | None = None
    extra_files: list[Path] = field(default_factory=list)

    # Filled in by the pipeline stages
    cover_image: object | None = None      # PIL.Image.Image
    cover_image_format: str = ""
    text: bytes = b""
    styles: bytes = b""
    headings: list[Heading] = field(default_factory=list)
    output_title: str = ""
    registry: AssetRegistry = field(default_factory=AssetRegistry)

    def add_heading(self, text: str) -> Heading:
        heading = Heading(text=text, index=len(self.headings) + 1)
        self.headings.append(heading)
        return heading
