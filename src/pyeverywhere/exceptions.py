"""Custom exception hierarchy for pyeverywhere."""

from __future__ import annotations


class EverywhereError(Exception):
    """Base exception for all pyeverywhere errors."""


class EverywhereConfigError(EverywhereError):
    """Invalid or missing configuration."""


class EverywhereValidationError(EverywhereError):
    """Inbound webhook body does not match the expected shape."""


class EverywhereTransportError(EverywhereError):
    """HTTP-level failure (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class EverywhereApiError(EverywhereError):
    """API returned a payload that does not match the documented shape."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str = "",
    ) -> None:
        self.endpoint = endpoint
        super().__init__(message)
