"""recaptcha-v3 - Server side verification of Google reCAPTCHA v3 tokens."""

__version__ = "0.1.0"

from recaptcha_v3.client import AsyncReCaptcha, ReCaptcha
from recaptcha_v3.errors import (
    ConfigurationError,
    ReCaptchaError,
    ResponseNotFetchedError,
    TransportError,
)
from recaptcha_v3.script import get_script_tag, render_script_tag
from recaptcha_v3.types import RenderedResponse, VerificationResult, VerifyOptions
from recaptcha_v3.verify import is_human, parse_verification

__all__ = [
    "ReCaptcha",
    "AsyncReCaptcha",
    "ReCaptchaError",
    "TransportError",
    "ConfigurationError",
    "ResponseNotFetchedError",
    "get_script_tag",
    "render_script_tag",
    "RenderedResponse",
    "VerificationResult",
    "VerifyOptions",
    "is_human",
    "parse_verification",
    "__version__",
]
