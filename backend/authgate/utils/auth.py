import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, Request, status

from authgate.errors import AuthError
from authgate.services.identity_provider import IdentityProvider
from authgate.utils.tokens import SessionTokenCodec, TokenError

logger = logging.getLogger(__name__)


def get_token_codec(request: Request) -> SessionTokenCodec:
    return request.app.state.token_codec


def get_identity_provider(request: Request) -> IdentityProvider:
    return request.app.state.identity_provider


async def get_current_subject(
    request: Request,
    codec: Annotated[SessionTokenCodec, Depends(get_token_codec)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> str:
    """
    Resolve the session token in the Authorization header to its subject.

    The header must be exactly ``Bearer <token>``. Expired and tampered
    tokens get the same response so callers cannot tell them apart.
    """
    if not authorization:
        raise AuthError(
            "Access denied. No token provided.",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise AuthError('Invalid authorization header format. Expected "Bearer <token>".')

    try:
        subject = codec.verify(parts[1])
    except TokenError as e:
        logger.debug("Rejected session token: %s", e)
        raise AuthError("Invalid or expired token.") from None

    request.state.subject = subject
    return subject


# Type aliases for dependency injection
CurrentSubject = Annotated[str, Depends(get_current_subject)]
TokenCodec = Annotated[SessionTokenCodec, Depends(get_token_codec)]
Provider = Annotated[IdentityProvider, Depends(get_identity_provider)]
