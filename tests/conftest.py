"""Pytest configuration and shared fixtures."""

import sys
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

# Add the project root to Python path so tests can import the package uninstalled
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from country_accounts.accounts import AccountQueries, AccountService  # noqa: E402
from country_accounts.app import configure_fastapi_app  # noqa: E402
from country_accounts.auth import PasswordHasher, SecurityManager  # noqa: E402
from country_accounts.config import load_config_from_env  # noqa: E402

TEST_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def security_manager() -> SecurityManager:
    """Create a token manager with a fixed key."""
    return SecurityManager(secret_key=TEST_SECRET_KEY)


@pytest.fixture
def password_hasher() -> PasswordHasher:
    """Create a hasher with the cheapest bcrypt cost."""
    return PasswordHasher(rounds=TEST_BCRYPT_ROUNDS)


@pytest_asyncio.fixture
async def queries(tmp_path: Path) -> AsyncIterator[AccountQueries]:
    """Open a credential store on a temporary database file."""
    async with AccountQueries(str(tmp_path / "accounts.db")) as opened:
        yield opened


@pytest.fixture
def service(
    queries: AccountQueries,
    security_manager: SecurityManager,
    password_hasher: PasswordHasher,
) -> AccountService:
    """Create an account service over the temporary store."""
    return AccountService(queries, security_manager, password_hasher)


@pytest.fixture
def app_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the application configuration at a temporary database."""
    database_path = tmp_path / "data" / "app.db"
    monkeypatch.setenv("DATABASE_PATH", str(database_path))
    monkeypatch.setenv("SECRET_KEY", TEST_SECRET_KEY)
    monkeypatch.setenv("BCRYPT_ROUNDS", str(TEST_BCRYPT_ROUNDS))
    monkeypatch.delenv("API_PREFIX", raising=False)
    monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)
    monkeypatch.delenv("ALGORITHM", raising=False)
    return database_path


@pytest.fixture
def client(app_env: Path) -> Iterator[TestClient]:
    """Run the full application with its lifespan."""
    app = configure_fastapi_app(load_config_from_env(None))
    with TestClient(app) as test_client:
        yield test_client
