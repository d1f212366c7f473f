"""Shared pytest fixtures for the Lemon test suite."""

from __future__ import annotations

import pytest


@pytest.fixture
def write_lm(tmp_path):
    """Write a .lm source file under tmp_path and return its path."""

    def _write(name: str, content: str):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write
