"""
Shared test configuration and fixtures.
"""

import os
import tempfile
from pathlib import Path

# Keep tests off any real database and log directory; must run before src is imported
_TEST_DIR = Path(tempfile.mkdtemp(prefix="wallet-registry-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_DIR / 'default.db'}")
os.environ.setdefault("ERROR_LOG_PATH", str(_TEST_DIR / "error.log"))

import pytest
from fastapi.testclient import TestClient

from src.app import create_app
from src.infra.database import DatabaseManager
from src.core.service.auth.utils.crypto import generate_ed25519_keypair, sign_message_ed25519

SIGNED_TIME = "2026-10-19T12:00:00Z"


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def app(db_url):
    """FastAPI app backed by a throw-away SQLite database."""
    return create_app(DatabaseManager(db_url))


@pytest.fixture
def client(app):
    """Test client; entering the context runs startup and shutdown."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
async def db_manager(db_url):
    manager = DatabaseManager(db_url)
    await manager.connect()
    yield manager
    await manager.close()


@pytest.fixture
async def session(db_manager):
    session_factory = db_manager.get_session_factory()
    async with session_factory() as session:
        yield session


@pytest.fixture
def wallet():
    """Fresh Ed25519 wallet: base58 seed and public key."""
    seed, public_key = generate_ed25519_keypair()
    return {"seed": seed, "public_key": public_key}


@pytest.fixture
def other_wallet():
    seed, public_key = generate_ed25519_keypair()
    return {"seed": seed, "public_key": public_key}


@pytest.fixture
def signed_payload():
    """Build a request body whose `time` is signed by the wallet; extra fields are merged in."""
    def _build(wallet, time=SIGNED_TIME, **fields):
        body = {
            "wallet": wallet["public_key"],
            "time": time,
            "message": sign_message_ed25519(time, wallet["seed"]),
        }
        body.update(fields)
        return body
    return _build
