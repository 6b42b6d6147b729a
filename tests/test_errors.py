from phishguard.errors import (
    ErrorKind,
    INVALID_KEY_MESSAGE,
    QUOTA_MESSAGE,
    classify_failure,
    network_error,
)


def test_quota_and_rate_limit_are_api_errors():
    assert classify_failure(Exception("Resource has been exhausted (e.g. check QUOTA).")).message == QUOTA_MESSAGE
    assert classify_failure(Exception("Rate limit reached for gpt-4o-mini")).kind is ErrorKind.API_ERROR


def test_bad_credentials_are_api_errors():
    err = classify_failure(Exception("Incorrect API key provided: sk-***"))
    assert err.kind is ErrorKind.API_ERROR
    assert err.message == INVALID_KEY_MESSAGE


def test_anything_else_is_unknown():
    assert classify_failure(TimeoutError("Request timed out.")).kind is ErrorKind.UNKNOWN


def test_error_envelope():
    assert network_error().to_dict() == {
        "error": "NETWORK_ERROR",
        "title": "Network Error",
        "message": network_error().message,
    }
