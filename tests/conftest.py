"""Shared pytest fixtures and configuration."""

import os
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Tuple

import pytest
import yaml


@pytest.fixture
def temp_home(monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a temporary home directory and point HOME at it."""
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir).resolve()
        monkeypatch.setenv("HOME", str(home))
        yield home


@pytest.fixture
def dotfiles_dir(temp_home: Path) -> Path:
    """Create the default ~/.cfg dotfiles directory."""
    cfg = temp_home / ".cfg"
    cfg.mkdir()
    return cfg


@pytest.fixture
def sample_link_list() -> str:
    """Sample link list for testing."""
    return (
        "links:\n"
        "  - link:\n"
        "      path: ~/.zshrc\n"
        "      origin: zshrc\n"
        "  - link:\n"
        "      path: ~/.vimrc\n"
        "      origin: vimrc\n"
    )


def create_test_files(base_dir: Path, files: Dict[str, str]) -> None:
    """Create test files with the given contents under base_dir."""
    for name, content in files.items():
        file_path = base_dir / name
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)


def write_link_list(
    path: Path, links: List[Tuple[str, str]], **extra: object
) -> Path:
    """Write a link list of (path, origin) pairs as YAML."""
    document: Dict[str, object] = {
        "links": [{"link": {"path": dest, "origin": origin}} for dest, origin in links]
    }
    document.update(extra)
    path.write_text(yaml.safe_dump(document, sort_keys=False))
    return path


def assert_symlink_correct(link: Path, target: Path) -> None:
    """Assert that link is a symlink pointing at target."""
    assert link.is_symlink(), f"{link} is not a symlink"
    assert Path(os.readlink(link)) == target
    assert link.resolve() == target.resolve()
