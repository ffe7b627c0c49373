"""
Error hierarchy for reCAPTCHA verification.

ReCaptchaError is the base for every error the package raises on purpose.
A malformed API body is not an error: it classifies as "not human".
"""

from __future__ import annotations

from typing import Any, Optional


class ReCaptchaError(Exception):
    """Base error. All typed errors inherit from this."""

    error_code: str = "recaptcha_error"

    def __init__(self, message: str, *, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class TransportError(ReCaptchaError):
    """The siteverify call failed (DNS, TLS, timeout or a non-2xx answer)."""

    error_code = "transport_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code


class ConfigurationError(ReCaptchaError, ValueError):
    error_code = "configuration_error"


class ResponseNotFetchedError(ReCaptchaError):
    """Classification was requested before any API response was stored."""

    error_code = "response_not_fetched"
