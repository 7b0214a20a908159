#!/usr/bin/env python3
"""
bindery - Package a manuscript (Markdown or HTML) into an EPUB.

The book is described by a JSON file (default: epub_info.json):

  {
    "isbn": "978-0-00-000000-0",
    "title": "My Book",
    "author": "A. Writer",
    "edition_number": 2,
    "include_contents_page": true,
    "include_copyright_page": true,
    "should_capitalize_headings": false,
    "paths": {"cover_image": "cover.jpg", "styles": "styles.css", "text": "book.md"},
    "files": ["fonts/body.otf"]
  }

Quick start:
  1. python bindery.py epub_info.json --dry-run
  2. python bindery.py epub_info.json --output-dir dist
"""

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from config import DEFAULT_CONFIG_NAME


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Package a Markdown or HTML manuscript into an EPUB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List headings and embedded files without writing anything:
  python bindery.py epub_info.json --dry-run

  # Build into ./dist:
  python bindery.py epub_info.json --output-dir dist

Environment (.env is read if present):
  BINDERY_CONFIG       default config path
  BINDERY_OUTPUT_DIR   default output directory
        """,
    )
    parser.add_argument(
        "config", type=Path, nargs="?", default=None,
        help=f"Path to the book's JSON config (default: $BINDERY_CONFIG or {DEFAULT_CONFIG_NAME})",
    )
    parser.add_argument(
        "--output-dir", type=Path, default=None, metavar="DIR",
        help="Directory for the .epub (default: $BINDERY_OUTPUT_DIR or .)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Prepare the book and list its contents without writing an archive",
    )
    parser.add_argument(
        "--quiet", action="store_true",
        help="Only print errors and the output path",
    )
    return parser.parse_args()


def print_summary(project) -> None:
    print(f"Title:  {project.title}")
    if project.author:
        print(f"Author: {project.author}")
    if project.isbn:
        print(f"ISBN:   {project.isbn}")
    print(f"Cover:  {project.cover_image_path or '(none)'}")

    print(f"\nFound {len(project.headings)} headings:")
    print("-" * 70)
    for heading in project.headings:
        print(f"  {heading.index:2d}. {heading.text:<50} #{heading.anchor}")
    print("-" * 70)

    print(f"\nEmbedded {len(project.registry)} files:")
    for datum in project.registry:
        print(f"  {datum.path}  {datum.mime_type}  {len(datum.content):>9,} bytes")
    print()


def main():
    args = parse_args()
    load_dotenv()

    # Import pipeline lazily to keep --help fast
    from errors import BinderyError
    from config import load_project
    from epub_builder import build_epub
    from pipeline import prepare

    config_path = args.config or Path(os.getenv("BINDERY_CONFIG", DEFAULT_CONFIG_NAME))
    output_dir = args.output_dir or Path(os.getenv("BINDERY_OUTPUT_DIR", "."))
    verbose = not args.quiet

    try:
        if verbose:
            print(f"Reading: {config_path}")
        project = load_project(config_path)
        prepare(project, verbose=verbose)

        if verbose:
            print()
            print_summary(project)

        if args.dry_run:
            print("Dry run complete. No archive written.")
            return

        epub_path = build_epub(project, output_dir, quiet=args.quiet)
    except BinderyError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Done! EPUB saved to: {epub_path}")


if __name__ == "__main__":
    main()
