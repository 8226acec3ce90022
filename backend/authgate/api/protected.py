import logging

from fastapi import APIRouter

from authgate.errors import AccountNotFoundError, ProviderError
from authgate.schemas.auth import AccountSummary, ProtectedResponse
from authgate.utils.auth import CurrentSubject, Provider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Protected"])


@router.get("/protected", response_model=ProtectedResponse)
async def protected_resource(
    subject: CurrentSubject,
    provider: Provider,
) -> ProtectedResponse:
    # A token can outlive its account, so a failed lookup is the caller's problem
    try:
        account = await provider.get_user(subject)
    except ProviderError as e:
        logger.info("Token subject %s could not be resolved: %s", subject, e)
        raise AccountNotFoundError("User not found.") from None

    return ProtectedResponse(
        message=f"Hello {account.display_name or 'User'}, you have access to this protected route.",
        user=AccountSummary(
            uid=account.uid,
            email=account.email,
            display_name=account.display_name,
        ),
    )
