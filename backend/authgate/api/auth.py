import logging

from fastapi import APIRouter, status

from authgate.schemas.auth import SigninRequest, SigninResponse, SignupRequest, SignupResponse
from authgate.utils.auth import Provider, TokenCodec

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    signup_data: SignupRequest,
    provider: Provider,
    codec: TokenCodec,
) -> SignupResponse:
    signup_data.require("email", "password", "display_name")

    account = await provider.create_user(
        signup_data.email,
        signup_data.password,
        signup_data.display_name,
    )
    token = codec.mint(account.uid)
    logger.info("Created account %s", account.uid)

    return SignupResponse(
        message="User created successfully",
        uid=account.uid,
        email=account.email,
        display_name=account.display_name,
        token=token,
    )


@router.post("/signin", response_model=SigninResponse)
async def signin(
    signin_data: SigninRequest,
    provider: Provider,
    codec: TokenCodec,
) -> SigninResponse:
    signin_data.require("email", "password")

    result = await provider.verify_password(signin_data.email, signin_data.password)
    account = result.account
    token = codec.mint(account.uid)
    logger.info("Signed in account %s", account.uid)

    return SigninResponse(
        message="User signed in successfully",
        uid=account.uid,
        email=account.email,
        display_name=account.display_name,
        token=token,
        id_token=result.id_token,
    )
