"""Identity provider implementations."""

from authgate.services.firebase_provider import FirebaseIdentityProvider
from authgate.services.identity_provider import Account, IdentityProvider, SignInResult

__all__ = [
    "Account",
    "FirebaseIdentityProvider",
    "IdentityProvider",
    "SignInResult",
]
