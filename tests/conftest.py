"""
Shared pytest configuration.

Puts the project root on sys.path so `import unixora` works without an
install, and provides a logged-in session context.
"""

import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from unixora.client import MemoryStorage, SessionContext  # noqa: E402

PROFILE = {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"}


@pytest.fixture
def context() -> SessionContext:
    ctx = SessionContext(MemoryStorage())
    ctx.save("test-token", PROFILE)
    return ctx


@pytest.fixture
def anonymous_context() -> SessionContext:
    return SessionContext(MemoryStorage())
