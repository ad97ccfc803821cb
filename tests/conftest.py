"""Shared fixtures for tests."""

from pathlib import Path

import pytest

from bdd_reconciler.testing.payloads import WriteReportFn


@pytest.fixture
def write_report(tmp_path: Path) -> WriteReportFn:
    """Return a function to write report files below a temporary directory."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
