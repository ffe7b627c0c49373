"""ReCaptcha - server side verification client for Google reCAPTCHA v3."""

import dataclasses
from typing import Any, Optional

import httpx

from .errors import ConfigurationError, ResponseNotFetchedError, TransportError
from .logging import get_logger
from .types import CACHE_CONTROL, RenderedResponse, VerificationResult, VerifyOptions
from .verify import is_human, parse_verification, validate_threshold

log = get_logger(__name__)


class _BaseReCaptcha:
    """State and classification shared by the sync and async clients."""

    # Url to Google's reCAPTCHA v3 API
    API_URL = "https://www.google.com/recaptcha/api/siteverify"

    def __init__(
        self,
        secret_key: str,
        options: Optional[VerifyOptions] = None,
        timeout: Optional[float] = None,
    ):
        if not secret_key:
            raise ConfigurationError("A reCAPTCHA secret key is required")
        self.secret_key = secret_key
        # Copy so instances never share a mutable options object
        self.options = (
            dataclasses.replace(options) if options is not None else VerifyOptions()
        )
        if timeout is not None:
            self.options.timeout = timeout
        self.options.threshold = validate_threshold(self.options.threshold)

        self._api_response: Optional[str] = None

    def set_action(self, action: str) -> None:
        """
        Define the action value to verify the request with.

        This should be the action parameter used at token generation.
        """
        self.options.action = action

    def set_threshold_score(self, threshold: float) -> None:
        """
        Set the score from which a request is considered human.

        A score equal to or greater than the threshold is human, any lower
        score is a bot.

        Raises:
            ConfigurationError: If threshold is outside 0.0 - 1.0
        """
        self.options.threshold = validate_threshold(threshold)

    def set_hostname(self, hostname: str) -> None:
        """Set the hostname the token is expected to be solved on."""
        self.options.hostname = hostname

    @property
    def api_response(self) -> Optional[str]:
        """Raw body of the last siteverify response, None before any fetch."""
        return self._api_response

    def _payload(self, token: str, remote_ip: Optional[str]) -> dict:
        payload = {"secret": self.secret_key, "response": token}
        if remote_ip:
            payload["remoteip"] = remote_ip
        return payload

    def _store(self, response: httpx.Response) -> str:
        self._api_response = response.text
        return self._api_response

    def _require_response(self) -> str:
        if self._api_response is None:
            raise ResponseNotFetchedError(
                "No API response stored; call get_api_response() first"
            )
        return self._api_response

    def validate_response(self) -> bool:
        """
        Validate the stored response of the reCAPTCHA API.

        Returns:
            True for human requests, False otherwise. Malformed responses
            are never human.

        Raises:
            ResponseNotFetchedError: If no response was fetched yet
            ConfigurationError: If the expected action or hostname is not set
        """
        return is_human(self._require_response(), self.options)

    def is_human(self) -> bool:
        """Alias of validate_response()."""
        return self.validate_response()

    def get_result(self) -> Optional[VerificationResult]:
        """Parsed view of the stored response, None if it is malformed."""
        return parse_verification(self._require_response())

    def send_api_response(self) -> RenderedResponse:
        """Describe the stored API response as a cacheable JSON response."""
        return RenderedResponse(
            body=self._require_response(),
            headers={
                "Cache-Control": CACHE_CONTROL,
                "Content-Type": "application/json",
            },
        )


def _transport_error(exc: httpx.HTTPError) -> TransportError:
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        log.error(
            "recaptcha_api_error",
            status_code=status_code,
            response_text=exc.response.text[:200],
        )
        return TransportError(
            f"reCAPTCHA API returned HTTP {status_code}", status_code=status_code
        )
    log.error("recaptcha_request_failed", error=str(exc), error_type=type(exc).__name__)
    return TransportError(f"reCAPTCHA API request failed: {exc}")


class ReCaptcha(_BaseReCaptcha):
    """
    Blocking reCAPTCHA v3 verification client.

    One instance holds the result of one verification; do not share an
    instance between concurrent requests.

    Example:
        >>> with ReCaptcha("secret") as recaptcha:
        ...     recaptcha.set_action("login")
        ...     recaptcha.set_hostname("example.com")
        ...     recaptcha.get_api_response(token)
        ...     human = recaptcha.validate_response()
    """

    def __init__(
        self,
        secret_key: str,
        options: Optional[VerifyOptions] = None,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Initialize the ReCaptcha client. No network I/O happens here.

        Args:
            secret_key: Secret reCAPTCHA key
            options: Expected action, threshold, hostname and timeout
            timeout: Overrides options.timeout (seconds)
            client: Optional httpx.Client to send requests with. It is not
                closed by this instance.
        """
        super().__init__(secret_key, options, timeout)
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.options.timeout)
        return self._client

    def get_api_response(self, token: str, remote_ip: Optional[str] = None) -> str:
        """
        Get a validation response from the reCAPTCHA API.

        E.g.
        {
          "success": true|false,      // valid reCAPTCHA token for your site
          "score": number,            // score for this request (0.0 - 1.0)
          "action": string,           // action name for this request
          "challenge_ts": timestamp,  // ISO format yyyy-MM-dd'T'HH:mm:ssZZ
          "hostname": string,         // site where the reCAPTCHA was solved
          "error-codes": [...]        // optional
        }

        Args:
            token: Token produced by the browser script
            remote_ip: Optional IP address of the user

        Returns:
            Raw response body, also stored for validate_response()

        Raises:
            TransportError: If the request fails or the API answers non-2xx
        """
        try:
            response = self._get_client().post(
                self.API_URL,
                data=self._payload(token, remote_ip),
                timeout=self.options.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise _transport_error(e) from e
        return self._store(response)

    def verify(self, token: str, remote_ip: Optional[str] = None) -> bool:
        """Fetch the verification for token and classify it."""
        self.get_api_response(token, remote_ip)
        return self.validate_response()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ReCaptcha":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class AsyncReCaptcha(_BaseReCaptcha):
    """
    Async reCAPTCHA v3 verification client.

    Example:
        >>> async with AsyncReCaptcha("secret", VerifyOptions(
        ...     action="login", hostname="example.com")) as recaptcha:
        ...     human = await recaptcha.verify(token)
    """

    def __init__(
        self,
        secret_key: str,
        options: Optional[VerifyOptions] = None,
        *,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(secret_key, options, timeout)
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.options.timeout)
        return self._client

    async def get_api_response(
        self, token: str, remote_ip: Optional[str] = None
    ) -> str:
        """
        Get a validation response from the reCAPTCHA API.

        Raises:
            TransportError: If the request fails or the API answers non-2xx
        """
        try:
            response = await self._get_client().post(
                self.API_URL,
                data=self._payload(token, remote_ip),
                timeout=self.options.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise _transport_error(e) from e
        return self._store(response)

    async def verify(self, token: str, remote_ip: Optional[str] = None) -> bool:
        """Fetch the verification for token and classify it."""
        await self.get_api_response(token, remote_ip)
        return self.validate_response()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "AsyncReCaptcha":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()
