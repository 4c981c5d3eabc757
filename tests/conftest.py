"""Shared fixtures for perch tests."""

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """An empty template directory."""
    root = tmp_path / "templates"
    root.mkdir()
    return root


@pytest.fixture
def write_template(template_dir: Path) -> Callable[[str, str], Path]:
    """Write a template under ``template_dir`` and return its path."""

    def _write(name: str, text: str) -> Path:
        path = template_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
