"""Pytest configuration and fixtures."""

import textwrap
from pathlib import Path

import pytest


@pytest.fixture()
def tmp_yaml(tmp_path):
    """Helper that writes YAML content to a temp file and returns its path."""

    def _write(content: str) -> Path:
        p = tmp_path / "fixtures.yaml"
        p.write_text(textwrap.dedent(content))
        return p

    return _write
