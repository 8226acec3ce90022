from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from authgate.errors import FieldValidationError


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TokenPayload(BaseModel):
    sub: str = Field(..., min_length=1)  # Subject (provider uid)
    exp: int  # Expiration timestamp
    iat: int  # Issued at timestamp
    jti: str | None = None


class CredentialsRequest(CamelModel):
    email: str | None = None
    password: str | None = None

    def require(self, *fields: str) -> None:
        """Raise ``FieldValidationError`` naming every field that is absent or empty."""
        missing = [
            type(self).model_fields[name].alias or name
            for name in fields
            if not getattr(self, name)
        ]
        if missing:
            raise FieldValidationError(missing)


class SignupRequest(CredentialsRequest):
    display_name: str | None = None


class SigninRequest(CredentialsRequest):
    pass


class AccountSummary(CamelModel):
    uid: str
    email: str | None = None
    display_name: str | None = None


class SignupResponse(AccountSummary):
    message: str
    token: str = Field(..., description="Session token for the protected API")


class SigninResponse(SignupResponse):
    id_token: str = Field(..., description="Provider credential, passed through unchanged")


class ProtectedResponse(CamelModel):
    message: str
    user: AccountSummary
