"""FastAPI integration for reCAPTCHA v3 token verification."""

from typing import Optional

import httpx

try:
    from fastapi import HTTPException, Request
    from fastapi.responses import Response
except ImportError:
    raise ImportError(
        "FastAPI is not installed. Install it with: pip install 'recaptcha-v3[fastapi]'"
    )

from .client import AsyncReCaptcha
from .errors import ConfigurationError, TransportError
from .types import DEFAULT_THRESHOLD, RenderedResponse, VerificationResult, VerifyOptions
from .verify import check_options


class ReCaptchaVerify:
    """
    FastAPI dependency verifying the reCAPTCHA token posted with a form.

    Usage:
        from recaptcha_v3.fastapi import ReCaptchaVerify

        recaptcha = ReCaptchaVerify(
            secret_key="your-secret-key",
            action="login",
            hostname="example.com",
        )

        @app.post('/login')
        async def login(result: VerificationResult = Depends(recaptcha)):
            print(f"Score {result.score}")
            return {"ok": True}
    """

    def __init__(
        self,
        secret_key: str,
        action: str,
        hostname: str,
        threshold: float = DEFAULT_THRESHOLD,
        auto_error: bool = True,
        field_name: str = "token",
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize reCAPTCHA verification dependency.

        Args:
            secret_key: Secret reCAPTCHA key
            action: Action the token must have been generated for
            hostname: Hostname the token must have been solved on
            threshold: Minimum score counted as human (default: 0.5)
            auto_error: If True, raise HTTPException on failed verification.
                       If False, return None instead.
            field_name: Form field carrying the token (default: "token")
            timeout: Seconds for the siteverify call
            client: Optional httpx.AsyncClient shared by all requests. It is
                    not closed by this dependency.

        Raises:
            ConfigurationError: If the secret, action or hostname is empty,
                or the threshold is outside 0.0 - 1.0
        """
        if not secret_key:
            raise ConfigurationError("A reCAPTCHA secret key is required")
        self.secret_key = secret_key
        self.options = VerifyOptions(
            action=action, threshold=threshold, hostname=hostname
        )
        if timeout is not None:
            self.options.timeout = timeout
        self.auto_error = auto_error
        self.field_name = field_name
        self.client = client
        check_options(self.options)

    def _fail(self, status_code: int, detail: str) -> None:
        if self.auto_error:
            raise HTTPException(status_code=status_code, detail=detail)
        return None

    async def __call__(self, request: Request) -> Optional[VerificationResult]:
        """
        Verify the token from the request form data.

        Returns:
            VerificationResult if the request is human, None otherwise
            (when auto_error=False)

        Raises:
            HTTPException: 400 for a missing token, 403 for a bot request,
                502 when the reCAPTCHA API is unreachable (auto_error=True)
        """
        form = await request.form()
        token = form.get(self.field_name)
        if not token or not isinstance(token, str):
            return self._fail(400, f"Missing reCAPTCHA token field '{self.field_name}'")

        client_ip = request.client.host if request.client else None

        # A fresh verifier per request: the stored response is per-verification state
        async with AsyncReCaptcha(
            self.secret_key, self.options, client=self.client
        ) as recaptcha:
            try:
                human = await recaptcha.verify(token, remote_ip=client_ip)
            except TransportError:
                return self._fail(502, "reCAPTCHA verification unavailable")
            result = recaptcha.get_result()

        if not human or result is None:
            return self._fail(403, "reCAPTCHA verification failed")
        return result


def to_response(rendered: RenderedResponse) -> Response:
    """Convert a RenderedResponse into a FastAPI Response."""
    return Response(
        content=rendered.body,
        status_code=rendered.status_code,
        headers=dict(rendered.headers),
    )
