import asyncio
import logging
from typing import Any

import firebase_admin
import httpx
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from authgate.config import DEFAULT_IDENTITY_TOOLKIT_URL, Settings
from authgate.errors import AccountNotFoundError, ConfigurationError, ProviderError
from authgate.services.identity_provider import Account, IdentityProvider, SignInResult

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "authgate"
SIGN_IN_FALLBACK_MESSAGE = "An error occurred during sign-in."


def _account_from_record(record: Any) -> Account:
    return Account(
        uid=record.uid,
        email=record.email,
        display_name=record.display_name,
    )


def _extract_error_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of an Identity Toolkit error body."""
    try:
        data = response.json()
    except ValueError:
        return SIGN_IN_FALLBACK_MESSAGE

    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return SIGN_IN_FALLBACK_MESSAGE


class FirebaseIdentityProvider(IdentityProvider):
    """
    Identity provider backed by Firebase Authentication.

    Account creation and lookup go through the Admin SDK, which is blocking,
    so those calls run in a worker thread. Password verification has no
    Admin SDK equivalent and is a REST call to the Identity Toolkit
    ``accounts:signInWithPassword`` endpoint using the project's API key.
    """

    def __init__(
        self,
        api_key: str,
        firebase_app: firebase_admin.App,
        http_client: httpx.AsyncClient,
        identity_toolkit_url: str = DEFAULT_IDENTITY_TOOLKIT_URL,
        max_retries: int = 2,
    ):
        self.api_key = api_key
        self.firebase_app = firebase_app
        self.identity_toolkit_url = identity_toolkit_url.rstrip("/")
        self.max_retries = max_retries
        self._http = http_client

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseIdentityProvider":
        """Initialize the Firebase app once from the service account file."""
        try:
            firebase_app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            try:
                cred = credentials.Certificate(settings.firebase_credentials_path)
            except (OSError, ValueError) as e:
                raise ConfigurationError(
                    f"Could not load Firebase service account from "
                    f"{settings.firebase_credentials_path}: {e}"
                ) from e
            firebase_app = firebase_admin.initialize_app(cred, name=FIREBASE_APP_NAME)

        return cls(
            api_key=settings.firebase_api_key,
            firebase_app=firebase_app,
            http_client=httpx.AsyncClient(timeout=settings.provider_timeout),
            identity_toolkit_url=settings.identity_toolkit_url,
            max_retries=settings.provider_max_retries,
        )

    async def create_user(self, email: str, password: str, display_name: str) -> Account:
        try:
            record = await asyncio.to_thread(
                auth.create_user,
                email=email,
                password=password,
                display_name=display_name,
                app=self.firebase_app,
            )
        # The Admin SDK validates arguments locally and raises ValueError
        # for things like short passwords or malformed emails.
        except (FirebaseError, ValueError) as e:
            logger.warning("Firebase rejected account creation: %s", e)
            raise ProviderError(str(e)) from None
        return _account_from_record(record)

    async def get_user(self, uid: str) -> Account:
        try:
            record = await asyncio.to_thread(auth.get_user, uid, app=self.firebase_app)
        except auth.UserNotFoundError as e:
            raise AccountNotFoundError(str(e)) from None
        except (FirebaseError, ValueError) as e:
            logger.warning("Firebase user lookup failed for %s: %s", uid, e)
            raise ProviderError(str(e)) from None
        return _account_from_record(record)

    async def verify_password(self, email: str, password: str) -> SignInResult:
        url = f"{self.identity_toolkit_url}/accounts:signInWithPassword"
        payload = {"email": email, "password": password, "returnSecureToken": True}

        response = None
        for attempt in range(self.max_retries):
            try:
                response = await self._http.post(url, params={"key": self.api_key}, json=payload)
                break
            except httpx.RequestError as e:
                logger.warning(
                    "Identity Toolkit request failed (attempt %d/%d): %s",
                    attempt + 1,
                    self.max_retries,
                    e,
                )

        if response is None:
            raise ProviderError(SIGN_IN_FALLBACK_MESSAGE)

        if response.status_code != 200:
            message = _extract_error_message(response)
            logger.info("Sign-in rejected by Identity Toolkit: %s", message)
            raise ProviderError(message)

        try:
            data = response.json()
            account = Account(
                uid=data["localId"],
                email=data.get("email"),
                display_name=data.get("displayName"),
            )
            id_token = data["idToken"]
        except (ValueError, KeyError, TypeError):
            logger.exception("Unexpected sign-in response from Identity Toolkit")
            raise ProviderError(SIGN_IN_FALLBACK_MESSAGE) from None

        return SignInResult(account=account, id_token=id_token)

    async def aclose(self) -> None:
        await self._http.aclose()
