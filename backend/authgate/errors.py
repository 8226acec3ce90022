"""Error types raised by the gateway.

Every ``GatewayError`` is rendered by the application as ``{"error": message}``
with the error's ``status_code``. ``ConfigurationError`` is never rendered; it
stops the process before it serves anything.
"""

from fastapi import status


class ConfigurationError(RuntimeError):
    """Required startup configuration is missing or unusable."""


class GatewayError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class FieldValidationError(GatewayError):
    """Required request fields are missing or empty."""

    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(f"Missing required fields: {', '.join(fields)}.")


class ProviderError(GatewayError):
    """The identity provider rejected the request or could not be reached."""


class AccountNotFoundError(ProviderError):
    pass


class AuthError(GatewayError):
    pass
