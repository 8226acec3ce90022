import os

# Set test environment
os.environ["JWT_SECRET"] = "test-signing-secret"
os.environ["FIREBASE_API_KEY"] = "test-api-key"

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from authgate.config import Settings
from authgate.errors import AccountNotFoundError, ProviderError
from authgate.main import create_app
from authgate.services.identity_provider import Account, IdentityProvider, SignInResult
from authgate.utils.tokens import SessionTokenCodec


class FakeIdentityProvider(IdentityProvider):
    """In-memory stand-in for Firebase that records every call."""

    def __init__(self):
        self.accounts: dict[str, Account] = {}
        self.passwords: dict[str, str] = {}
        self.calls: list[str] = []
        self.closed = False

    async def create_user(self, email: str, password: str, display_name: str) -> Account:
        self.calls.append("create_user")
        if any(a.email == email for a in self.accounts.values()):
            raise ProviderError("The user with the provided email already exists (EMAIL_EXISTS).")
        if len(password) < 6:
            raise ProviderError("Password must be a string at least 6 characters long.")
        account = Account(uid=uuid4().hex, email=email, display_name=display_name)
        self.accounts[account.uid] = account
        self.passwords[email] = password
        return account

    async def verify_password(self, email: str, password: str) -> SignInResult:
        self.calls.append("verify_password")
        if self.passwords.get(email) != password:
            raise ProviderError("INVALID_LOGIN_CREDENTIALS")
        account = next(a for a in self.accounts.values() if a.email == email)
        return SignInResult(account=account, id_token=f"provider-id-token-{account.uid}")

    async def get_user(self, uid: str) -> Account:
        self.calls.append("get_user")
        try:
            return self.accounts[uid]
        except KeyError:
            raise AccountNotFoundError(
                f"No user record found for the provided user ID: {uid}."
            ) from None

    async def aclose(self) -> None:
        self.closed = True


class FrozenClock:
    """Settable clock for driving token expiry in tests."""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret="test-signing-secret",
        firebase_api_key="test-api-key",
    )


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def app(settings: Settings, identity_provider: FakeIdentityProvider) -> FastAPI:
    return create_app(settings, identity_provider=identity_provider)


@pytest.fixture
def token_codec(app: FastAPI) -> SessionTokenCodec:
    return app.state.token_codec


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client against the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def test_account(identity_provider: FakeIdentityProvider) -> Account:
    """Register a user directly with the provider, bypassing the API."""
    account = await identity_provider.create_user("a@x.com", "pw123456", "Ann")
    identity_provider.calls.clear()
    return account


@pytest.fixture
def auth_headers(test_account: Account, token_codec: SessionTokenCodec) -> dict[str, str]:
    """Create authorization headers for authenticated requests."""
    token = token_codec.mint(test_account.uid)
    return {"Authorization": f"Bearer {token}"}
