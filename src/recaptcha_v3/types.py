"""Type definitions for reCAPTCHA verification."""

from dataclasses import dataclass, field
from typing import Optional

# Cache policy sent with every rendered response
CACHE_CONTROL = "no-transform,public,max-age=300,s-maxage=900"

DEFAULT_THRESHOLD = 0.5
DEFAULT_TIMEOUT = 10.0


@dataclass
class VerificationResult:
    """Parsed body of a siteverify response."""

    success: bool
    score: float  # 0.0 (bot) .. 1.0 (human)
    action: str
    hostname: str
    challenge_ts: Optional[str] = None  # ISO-8601 time the challenge was loaded
    error_codes: list[str] = field(default_factory=list)


@dataclass
class VerifyOptions:
    """Options for classifying a verification result.

    ``action`` and ``hostname`` have no defaults: a request is only considered
    human when both match, so they must be set before classification.
    """

    action: Optional[str] = None  # action label used at token generation
    threshold: float = DEFAULT_THRESHOLD  # minimum score counted as human
    hostname: Optional[str] = None  # host the token must have been issued on
    timeout: float = DEFAULT_TIMEOUT  # seconds for the siteverify call


@dataclass
class RenderedResponse:
    """Description of an HTTP response for an outer layer to send."""

    body: str
    headers: dict[str, str] = field(default_factory=dict)
    status_code: int = 200

    @property
    def media_type(self) -> Optional[str]:
        return self.headers.get("Content-Type")
