"""Test configuration and fixtures for s3-tools."""

import pytest


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing."""
    return tmp_path


@pytest.fixture
def sample_file_structure(temp_dir):
    """Create a small tree: root/{a.txt, sub/b.txt}."""
    root = temp_dir / "root"
    root.mkdir()
    (root / "a.txt").write_text("content-a")

    subdir = root / "sub"
    subdir.mkdir()
    (subdir / "b.txt").write_text("content-b" * 10)

    return root


@pytest.fixture
def unreadable_file_structure(temp_dir):
    """Create a tree whose middle entry cannot be opened.

    A dangling symlink fails to open even for root, unlike chmod 000.
    """
    root = temp_dir / "broken"
    root.mkdir()
    (root / "a.txt").write_text("content-a")
    (root / "b.bin").symlink_to(temp_dir / "does-not-exist")
    (root / "c.txt").write_text("content-c")
    return root
