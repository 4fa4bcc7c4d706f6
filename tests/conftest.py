"""Pytest configuration for test isolation.

The package reads ``MASS_SEND_*`` variables (see ``mass_send.config``). A
developer's shell or ``.env`` may set a node URL or a different decimal
separator, which would make canonical-text assertions and offline tests
depend on the machine running them. An autouse fixture clears those
variables for every test.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import pytest

# Make sure the workspace `packages/` dir is on sys.path so `mass_send` is importable
_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("MASS_SEND_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    from mass_send import logging_setup

    handler = logging_setup._handler
    if handler is None:
        return
    for name in ("mass_send", "httpx"):
        logger = logging.getLogger(name)
        logger.removeHandler(handler)
        logger.propagate = True
    logging_setup._handler = None
