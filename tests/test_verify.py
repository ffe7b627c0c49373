"""Tests for reCAPTCHA response parsing and classification."""

import json

import pytest
from structlog.testing import capture_logs

from recaptcha_v3.errors import ConfigurationError
from recaptcha_v3.types import VerifyOptions
from recaptcha_v3.verify import is_human, parse_verification


def _body(**overrides) -> str:
    data = {
        "success": True,
        "score": 0.9,
        "action": "login",
        "challenge_ts": "2026-10-19T10:00:00Z",
        "hostname": "example.com",
    }
    data.update(overrides)
    return json.dumps(data)


@pytest.fixture
def options():
    return VerifyOptions(action="login", threshold=0.5, hostname="example.com")


def test_human_when_all_checks_pass(options):
    """Test that a matching successful response is human."""
    assert is_human(_body(), options) is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"success": False},
        {"action": "signup"},
        {"score": 0.49},
        {"hostname": "evil.example"},
    ],
)
def test_any_failed_check_is_bot(options, overrides):
    """Test that a single failing condition classifies as bot."""
    assert is_human(_body(**overrides), options) is False


def test_score_equal_to_threshold_is_human(options):
    """Test that the threshold comparison is inclusive."""
    assert is_human(_body(score=0.5), options) is True


@pytest.mark.parametrize(
    "raw",
    ["", "not json", "[1, 2, 3]", "null", '{"success": true'],
)
def test_malformed_body_is_bot(options, raw):
    """Test that malformed bodies fail closed without raising."""
    assert is_human(raw, options) is False


@pytest.mark.parametrize("missing", ["success", "score", "action", "hostname"])
def test_missing_field_is_bot(options, missing):
    """Test that a response without a required field is not human."""
    data = json.loads(_body())
    del data[missing]
    assert is_human(json.dumps(data), options) is False


@pytest.mark.parametrize(
    "score",
    ['"0.9"', "true", "Infinity", "-Infinity", "NaN", "7.5", "-0.1", "1.0001"],
)
def test_non_numeric_score_is_bot(options, score):
    """Test that scores that are not numbers in 0.0 - 1.0 are rejected."""
    raw = (
        f'{{"success": true, "score": {score}, '
        '"action": "login", "hostname": "example.com"}'
    )
    assert parse_verification(raw) is None
    assert is_human(raw, options) is False


def test_score_bounds_are_valid(options):
    """Test that exactly 0.0 and 1.0 are accepted scores."""
    assert is_human(_body(score=1.0), options) is True
    assert parse_verification(_body(score=0.0)) is not None


def test_human_classification_logs_nothing(options):
    """Test that successful classifications stay quiet."""
    with capture_logs() as logs:
        assert is_human(_body(), options) is True

    assert logs == []


def test_failed_verification_logs_error_codes(options):
    """Test that failed verifications log a warning with error codes."""
    raw = json.dumps({"success": False, "error-codes": ["invalid-input-response"]})

    with capture_logs() as logs:
        is_human(raw, options)

    assert logs == [
        {
            "event": "recaptcha_verification_failed",
            "log_level": "warning",
            "error_codes": ["invalid-input-response"],
        }
    ]


def test_google_error_response_is_bot(options):
    """Test the shape Google returns for an invalid token."""
    raw = json.dumps({"success": False, "error-codes": ["invalid-input-response"]})
    assert is_human(raw, options) is False


def test_missing_action_raises():
    """Test that classifying without an expected action fails fast."""
    with pytest.raises(ConfigurationError):
        is_human(_body(), VerifyOptions(hostname="example.com"))


def test_missing_hostname_raises():
    """Test that classifying without an expected hostname fails fast."""
    with pytest.raises(ConfigurationError):
        is_human(_body(), VerifyOptions(action="login"))


def test_out_of_range_threshold_raises():
    """Test that a threshold above 1.0 is rejected."""
    with pytest.raises(ConfigurationError):
        is_human(
            _body(), VerifyOptions(action="login", hostname="example.com", threshold=2)
        )


def test_parse_verification_fields():
    """Test that all fields are mapped onto VerificationResult."""
    result = parse_verification(_body(**{"error-codes": ["timeout-or-duplicate"]}))

    assert result is not None
    assert result.success is True
    assert result.score == 0.9
    assert result.action == "login"
    assert result.hostname == "example.com"
    assert result.challenge_ts == "2026-10-19T10:00:00Z"
    assert result.error_codes == ["timeout-or-duplicate"]


def test_parse_verification_defaults():
    """Test optional fields default when absent."""
    data = json.loads(_body())
    del data["challenge_ts"]
    result = parse_verification(json.dumps(data))

    assert result is not None
    assert result.challenge_ts is None
    assert result.error_codes == []


def test_parse_verification_integer_score():
    """Test that integer scores are accepted as floats."""
    result = parse_verification(_body(score=1))
    assert result is not None
    assert result.score == 1.0
    assert isinstance(result.score, float)


def test_parse_verification_malformed_returns_none():
    assert parse_verification("<html>oops</html>") is None
    assert parse_verification(None) is None
