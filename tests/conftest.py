"""
pytest configuration for sink tests.

Adds src directory to Python path for imports and provides shared fixtures.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from core.auth.credential_cache import EXPIRATION_FORMAT, Credential  # noqa: E402
from core.logging.context import clear_log_context  # noqa: E402


def expiration_in(minutes: float) -> str:
    """Expiration string ``minutes`` from now in the token config layout."""
    return (datetime.now(timezone.utc) + timedelta(minutes=minutes)).strftime(EXPIRATION_FORMAT)


@pytest.fixture
def make_credential():
    """Factory for credentials expiring a given number of minutes from now."""

    def _make(minutes: float = 60, access_key_id: str = "LTAI-test") -> Credential:
        return Credential(
            access_key_id=access_key_id,
            access_key_secret="secret",
            security_token="sts-token",
            expiration=expiration_in(minutes),
        )

    return _make


@pytest.fixture(autouse=True)
def reset_log_context():
    clear_log_context()
    yield
    clear_log_context()
