"""pipeline.py - Ordered preparation stages that fill in a Project before assembly."""

from pathlib import Path

from cover import load_cover
from epub_builder import build_epub
from minifier import Minifier
from models import Project
from normalizer import compute_output_title, normalize, register_extra_files
from stylesheet import rewrite_styles


def build_stages(minifier: Minifier, verbose: bool = False) -> list[tuple[str, object]]:
    """Each stage takes the Project, mutates it in place, and raises on failure."""
    return [
        ("cover image", load_cover),
        ("text", lambda project: normalize(project, minifier, verbose=verbose)),
        ("output title", compute_output_title),
        ("styles", lambda project: rewrite_styles(project, minifier, verbose=verbose)),
        ("files", lambda project: register_extra_files(project, verbose=verbose)),
    ]


def run_pipeline(project: Project, stages, verbose: bool = False) -> Project:
    for name, stage in stages:
        if verbose:
            print(f"  Preparing {name}...")
        stage(project)
    return project


def prepare(project: Project, minifier: Minifier | None = None, verbose: bool = False) -> Project:
    return run_pipeline(project, build_stages(minifier or Minifier(), verbose), verbose=verbose)


def generate(
    project: Project,
    output_dir: Path,
    minifier: Minifier | None = None,
    verbose: bool = False,
) -> Path:
    """Run every preparation stage, then write the archive. Returns the .epub path."""
    prepare(project, minifier, verbose=verbose)
    return build_epub(project, output_dir, quiet=not verbose)
