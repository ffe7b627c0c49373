"""Core reCAPTCHA v3 response classification.

Turns a raw siteverify body into a human/bot decision. Classification fails
closed: a body that is not JSON, not an object, or lacks any of the fields
needed for the decision is "not human" and never raises.

Only failed verifications and malformed bodies are logged (as warnings);
successful classifications emit nothing.
"""

import json
from numbers import Real
from typing import Any, Optional

from .errors import ConfigurationError
from .logging import get_logger
from .types import VerificationResult, VerifyOptions

log = get_logger(__name__)

_REQUIRED_FIELDS = ("success", "score", "action", "hostname")


def _load(raw: Optional[str]) -> Optional[dict]:
    if not raw:
        return None
    try:
        data: Any = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def parse_verification(raw: Optional[str]) -> Optional[VerificationResult]:
    """
    Parse a siteverify body.

    Args:
        raw: Response body as returned by the API

    Returns:
        VerificationResult, or None if the body is malformed or any of
        ``success``, ``score``, ``action`` or ``hostname`` is missing,
        or the score is not a number in 0.0 - 1.0

    Example:
        >>> result = parse_verification('{"success": true, "score": 0.9, '
        ...     '"action": "login", "hostname": "example.com"}')
        >>> result.score
        0.9
    """
    data = _load(raw)
    if data is None:
        return None
    if any(name not in data for name in _REQUIRED_FIELDS):
        return None

    score = data["score"]
    # bool is a Real too, but never a valid score
    if isinstance(score, bool) or not isinstance(score, Real):
        return None
    # Also rejects NaN and Infinity, which json.loads accepts
    if not 0.0 <= score <= 1.0:
        return None
    if not isinstance(data["action"], str) or not isinstance(data["hostname"], str):
        return None

    error_codes = data.get("error-codes") or []
    if not isinstance(error_codes, list):
        error_codes = [str(error_codes)]

    return VerificationResult(
        success=bool(data["success"]),
        score=float(score),
        action=data["action"],
        hostname=data["hostname"],
        challenge_ts=data.get("challenge_ts"),
        error_codes=[str(code) for code in error_codes],
    )


def check_options(options: VerifyOptions) -> None:
    """Raise ConfigurationError unless options can be classified against."""
    if not options.action:
        raise ConfigurationError("Expected action is not set; call set_action() first")
    if not options.hostname:
        raise ConfigurationError(
            "Expected hostname is not set; call set_hostname() first"
        )
    validate_threshold(options.threshold)


def validate_threshold(threshold: float) -> float:
    if isinstance(threshold, bool) or not isinstance(threshold, Real):
        raise ConfigurationError(f"Threshold must be a number, got {threshold!r}")
    if not 0.0 <= threshold <= 1.0:
        raise ConfigurationError(
            f"Threshold must be between 0.0 and 1.0, got {threshold}"
        )
    return float(threshold)


def classify(result: VerificationResult, options: VerifyOptions) -> bool:
    """Return True if every check passes for an already parsed result."""
    return (
        result.success
        and result.action == options.action
        and result.score >= options.threshold
        and result.hostname == options.hostname
    )


def is_human(raw: Optional[str], options: VerifyOptions) -> bool:
    """
    Classify a raw siteverify body.

    A request is human only if ALL of:
    - ``success`` is truthy
    - ``action`` equals ``options.action``
    - ``score`` is greater than or equal to ``options.threshold``
    - ``hostname`` equals ``options.hostname``

    Args:
        raw: Response body as returned by the API
        options: Expected action, threshold and hostname

    Returns:
        True for human requests, False otherwise (including malformed bodies)

    Raises:
        ConfigurationError: If the expected action or hostname is missing,
            or the threshold is out of range
    """
    check_options(options)

    result = parse_verification(raw)
    if result is None:
        data = _load(raw)
        if data is not None and data.get("error-codes"):
            log.warning(
                "recaptcha_verification_failed", error_codes=data.get("error-codes")
            )
        else:
            log.warning("recaptcha_response_malformed")
        return False

    if not result.success:
        log.warning("recaptcha_verification_failed", error_codes=result.error_codes)
    return classify(result, options)
