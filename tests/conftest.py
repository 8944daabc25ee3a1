# ============================================================================
# FILE: conftest.py
# RELPATH: file_bundle/tests/conftest.py
# PROJECT: FileBundle v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Pytest fixtures for the FileBundle test suite
# ============================================================================

"""
Pytest configuration and shared fixtures.

Provides sample source trees, a bundle-config factory and a helper that
splits bundle output back into records.
"""

import logging
import os
import sys
from typing import Dict, List

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from fbundle.config import BundleConfig


# ============================================================================
# Logging Isolation
# ============================================================================

@pytest.fixture(autouse=True)
def reset_fbundle_logger():
    """Undo console logging set up by CLI tests so caplog sees every record."""
    yield
    package_logger = logging.getLogger("fbundle")
    for handler in list(package_logger.handlers):
        if getattr(handler, "_fbundle_console", False):
            package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


# ============================================================================
# Filesystem Fixtures
# ============================================================================

@pytest.fixture
def source_tree(tmp_path):
    """
    Create a sample project to bundle.

    Structure:
        project/
            README.md
            .env
            src/
                main.py
                util.py
                main_test.py
            src/pkg/
                deep.py
            docs/
                guide.md
            build/
                out.log
            assets/
                logo.png (not valid UTF-8)
    """
    root = tmp_path / "project"
    files = {
        "README.md": "# Project\n",
        ".env": "SECRET=1\n",
        "src/main.py": "def main():\n    pass\n",
        "src/util.py": "def helper():\n    return True\n",
        "src/main_test.py": "def test_main():\n    assert True\n",
        "src/pkg/deep.py": "DEPTH = 2\n",
        "docs/guide.md": "Guide\n",
        "build/out.log": "log line\n",
    }
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    (root / "assets").mkdir()
    (root / "assets" / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\xff\xfe\x00")
    return root


@pytest.fixture
def out_dir(tmp_path):
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def make_config(source_tree, out_dir):
    """Factory for BundleConfig objects pointing at the sample tree."""
    def _make(**overrides) -> BundleConfig:
        settings = {
            "file_sep": "---",
            "src_globs": ("**",),
            "src_dir": source_tree,
            "out_dir": out_dir,
            "jobs": 1,
        }
        settings.update(overrides)
        return BundleConfig(**settings)
    return _make


# ============================================================================
# Assertion Helpers
# ============================================================================

def parse_records(text: str, separator: str) -> Dict[str, str]:
    """
    Split bundle text into {relative_path: content}.

    Only valid for single-line separators that do not occur in file content.
    """
    records: Dict[str, str] = {}
    prefix = separator + " "
    current_path = None
    lines: List[str] = []
    for line in text.split("\n"):
        if line.startswith(prefix):
            if current_path is not None:
                records[current_path] = "\n".join(lines)
            current_path = line[len(prefix):]
            lines = []
        else:
            lines.append(line)
    if current_path is not None:
        # The bundle ends with the last record's newline
        records[current_path] = "\n".join(lines[:-1])
    return records


@pytest.fixture
def records_of():
    """Return parse_records for use inside tests."""
    return parse_records


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: fbundle/config.py
# USAGE: Import fixtures in test files, pytest auto-discovers them
# ============================================================================
