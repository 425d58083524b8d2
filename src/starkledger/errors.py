"""
Error taxonomy shared by every layer of the client.

Every failure is surfaced to the immediate caller; nothing here retries.
"""

import re
from dataclasses import dataclass

_ELEMENT_PREFIX = re.compile(r"^\s*Element\s+(\d+)\s*:", re.IGNORECASE)


class StarkLedgerError(Exception):
    """Base exception for all client errors."""

    pass


class ConfigurationError(StarkLedgerError):
    """Missing or malformed credential, key or configuration.

    Raised before any network call is attempted.
    """

    pass


class MalformedResponse(StarkLedgerError):
    """Response could not be decoded into the expected shape."""

    pass


class NetworkError(StarkLedgerError):
    """Transport-level fault (DNS, connection reset, timeout)."""

    pass


@dataclass(frozen=True)
class ErrorEntry:
    """Single error reported by the API."""

    code: str
    message: str
    index: int | None = None

    @classmethod
    def from_api_response(cls, data: object) -> "ErrorEntry":
        """Create from one item of the response `errors` list."""
        if not isinstance(data, dict):
            return cls(code="unknown", message=str(data))

        message = str(data.get("message", ""))
        index = data.get("index")
        if index is None:
            # Batch errors are reported as "Element N: ..." by the API
            match = _ELEMENT_PREFIX.match(message)
            if match:
                index = int(match.group(1))
        else:
            try:
                index = int(index)
            except (TypeError, ValueError):
                index = None

        return cls(code=str(data.get("code", "unknown")), message=message, index=index)

    def __str__(self) -> str:
        prefix = f"[{self.index}] " if self.index is not None else ""
        return f"{prefix}{self.code}: {self.message}"


class ApiError(StarkLedgerError):
    """API returned an error response."""

    def __init__(
        self,
        status_code: int,
        errors: list[ErrorEntry] | None = None,
        response_body: str | None = None,
    ):
        self.status_code = status_code
        self.errors = errors or []
        self.response_body = response_body

        detail_str = "; ".join(str(e) for e in self.errors) if self.errors else "no details"
        super().__init__(f"API error {status_code}: {detail_str}")


class ValidationError(ApiError):
    """Input rejected by the API; no partial side effect occurred."""

    @property
    def indexes(self) -> list[int]:
        """Positions of the offending batch entries."""
        return sorted({e.index for e in self.errors if e.index is not None})


class Unauthorized(ApiError):
    """Signature or identity rejected by the server."""

    pass


class NotFound(ApiError):
    """Requested id does not exist."""

    pass


class ServerError(ApiError):
    """Server failed to process the request (5xx)."""

    pass


def error_for_status(
    status_code: int,
    errors: list[ErrorEntry],
    response_body: str | None = None,
) -> ApiError:
    """Map an HTTP status code to the matching ApiError subclass."""
    if status_code == 400:
        error_class: type[ApiError] = ValidationError
    elif status_code in (401, 403):
        error_class = Unauthorized
    elif status_code == 404:
        error_class = NotFound
    elif status_code >= 500:
        error_class = ServerError
    else:
        error_class = ApiError
    return error_class(status_code, errors, response_body)
