import httpx
import pytest

from monk_manager.domain.exceptions import (
    AIError,
    AuthenticationError,
    BusinessError,
    ConfigurationError,
    InvalidResponseError,
    ProviderError,
    RateLimitError,
    RequestFailedError,
    RequestTimeoutError,
    error_from_status,
    error_from_transport,
)


def test_error_display():
    assert str(RequestFailedError("test error")) == "API request failed: test error"
    assert str(RateLimitError()) == "Rate limit exceeded"
    assert str(RequestTimeoutError(30.0)) == "Timeout: 30s"
    assert str(InvalidResponseError("bad")) == "Invalid response from AI model: bad"
    assert str(ConfigurationError("nope")) == "Configuration error: nope"


def test_errors_share_business_base():
    err = ProviderError("boom", http_status=503)
    assert isinstance(err, AIError)
    assert isinstance(err, BusinessError)
    assert err.code == "PROVIDER_ERROR"
    assert err.http_status == 503


@pytest.mark.parametrize(
    "status, expected",
    [
        (401, AuthenticationError),
        (429, RateLimitError),
        (400, ProviderError),
        (404, ProviderError),
        (500, ProviderError),
        (503, ProviderError),
        (302, RequestFailedError),
    ],
)
def test_error_from_status(status, expected):
    assert isinstance(error_from_status(status, "detail"), expected)


def test_error_from_transport_timeout_first():
    request = httpx.Request("POST", "https://example.test/v1/messages")
    err = error_from_transport(httpx.ReadTimeout("timed out", request=request), 60.0)
    assert isinstance(err, RequestTimeoutError)
    assert err.duration == 60.0


def test_error_from_transport_connect_error():
    request = httpx.Request("POST", "https://example.test/v1/messages")
    err = error_from_transport(httpx.ConnectError("refused", request=request), 60.0)
    assert isinstance(err, RequestFailedError)
    assert "refused" in err.message
