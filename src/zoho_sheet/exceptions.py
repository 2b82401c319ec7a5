"""Zoho Sheet SDK exceptions."""

from __future__ import annotations


class ZohoSheetError(Exception):
    """Base exception for Zoho Sheet SDK errors."""

    pass


class AuthConfigurationError(ZohoSheetError):
    """Raised when there is no usable credential material."""

    pass


class AuthExchangeError(ZohoSheetError):
    """Raised when the Zoho accounts server rejects a token exchange."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{message}: {status_code} - {body}")


class InvalidArgumentError(ZohoSheetError, ValueError):
    """Raised when a required argument is missing; no request is sent."""

    pass


class RemoteApiError(ZohoSheetError):
    """Raised when the Sheet API answers with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Zoho API Error: {status_code}: {body}")


class MalformedResponseError(ZohoSheetError):
    """Raised when a 2xx response does not have the expected shape."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class RecordConversionError(ZohoSheetError):
    """Raised when record values cannot be converted to the target type.

    Attributes:
        errors: One ``(field, value, reason)`` tuple per failed field.
    """

    def __init__(self, errors: list[tuple[str, object, str]]):
        self.errors = errors
        details = ", ".join(f"{name}={value!r} ({reason})" for name, value, reason in errors)
        super().__init__(f"Failed to convert record fields: {details}")
