"""Pytest configuration for test isolation.

The ruleset loader and logging setup read ``STATEMENT_IMPORT_RULESET`` and
``STATEMENT_IMPORT_LOG_LEVEL`` from the environment, and the CLI loads a
``.env`` from the current working directory. A developer's shell or a stray
``.env`` file would otherwise leak into test runs, so each test gets a clean
environment and its own temporary working directory.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STATEMENT_IMPORT_RULESET", raising=False)
    monkeypatch.delenv("STATEMENT_IMPORT_LOG_LEVEL", raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir(parents=True, exist_ok=True)
    monkeypatch.chdir(workdir)


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    """Detach handlers the CLI callback or a test attached to the package logger."""

    yield
    logger = logging.getLogger("statement_import")
    for h in list(logger.handlers):
        logger.removeHandler(h)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
