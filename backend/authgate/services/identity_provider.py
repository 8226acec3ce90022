from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class Account:
    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass
class SignInResult:
    account: Account
    id_token: str  # Provider-issued credential, returned to the caller as-is


class IdentityProvider(ABC):
    """
    External account store and password-verification authority.

    Implementations raise ``ProviderError`` (or ``AccountNotFoundError``)
    with a message suitable for returning to the caller.
    """

    @abstractmethod
    async def create_user(self, email: str, password: str, display_name: str) -> Account:
        """Create an account and return its provider-assigned record."""

    @abstractmethod
    async def verify_password(self, email: str, password: str) -> SignInResult:
        """Check credentials against the provider's password endpoint."""

    @abstractmethod
    async def get_user(self, uid: str) -> Account:
        """Look up an account by uid."""

    async def aclose(self) -> None:
        """Release network resources held by the provider."""
