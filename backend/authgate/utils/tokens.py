import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode
from pydantic import ValidationError

from authgate.errors import ConfigurationError
from authgate.schemas.auth import TokenPayload

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(hours=1)


class TokenError(Exception):
    """Base class for session token verification failures."""


class InvalidToken(TokenError):
    pass


class ExpiredToken(TokenError):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionTokenCodec:
    """
    Mint and verify the session tokens handed out on signup and signin.

    Tokens are HS256 JWTs carrying ``sub``, ``iat``, ``exp`` and ``jti``.
    Verification is stateless: a signature check followed by comparing the
    codec's clock against ``exp``. A token is expired from the instant the
    clock reaches ``exp``.
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta = DEFAULT_TOKEN_TTL,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret:
            raise ConfigurationError("A signing secret is required to issue session tokens")
        self._secret = secret
        self.ttl = ttl
        self.algorithm = algorithm
        self._clock = clock

    def mint(self, subject: str) -> str:
        if not subject:
            raise ValueError("subject must be a non-empty string")

        now = self._clock()
        claims = {
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        if not token:
            raise InvalidToken("Token is empty")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                # Expiry is checked below against our own clock
                options={"verify_exp": False},
            )
            payload = TokenPayload(**claims)
        except (JWTError, ValidationError) as e:
            raise InvalidToken(str(e)) from None

        # The last signature character has unused bits that base64 decoding
        # ignores, so only the canonical encoding is accepted
        signature = token.rsplit(".", 1)[-1].encode()
        if base64url_encode(base64url_decode(signature)) != signature:
            raise InvalidToken("Signature is not canonically encoded")

        if self._clock().timestamp() >= payload.exp:
            raise ExpiredToken("Token has expired")

        return payload.sub
