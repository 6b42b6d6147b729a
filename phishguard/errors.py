from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN = "UNKNOWN"


OFFLINE_MESSAGE = "You appear to be offline. Please check your internet connection and try again."
INVALID_KEY_MESSAGE = "The configured API key is invalid. Please check the key and try again."
QUOTA_MESSAGE = "The API quota has been exceeded. Please try again later."
UNEXPECTED_MESSAGE = (
    "An unexpected error occurred while communicating with the analysis service. Please try again."
)

CREDENTIAL_MARKERS = ("api key not valid", "invalid_api_key", "incorrect api key", "missing credentials")
QUOTA_MARKERS = ("quota", "rate limit")


class PhishGuardError(Exception):
    def __init__(self, message: str, kind: ErrorKind, original_error: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.original_error = original_error

    @property
    def title(self) -> str:
        return "Network Error" if self.kind == ErrorKind.NETWORK_ERROR else "Analysis Failed"

    def to_dict(self) -> dict:
        return {"error": self.kind.value, "title": self.title, "message": self.message}


def network_error(original: Optional[BaseException] = None) -> PhishGuardError:
    return PhishGuardError(OFFLINE_MESSAGE, ErrorKind.NETWORK_ERROR, original)


def classify_failure(exc: BaseException) -> PhishGuardError:
    """Map a failure raised while online onto API_ERROR or UNKNOWN by its message."""
    text = str(exc).lower()
    if any(m in text for m in CREDENTIAL_MARKERS):
        return PhishGuardError(INVALID_KEY_MESSAGE, ErrorKind.API_ERROR, exc)
    if any(m in text for m in QUOTA_MARKERS):
        return PhishGuardError(QUOTA_MESSAGE, ErrorKind.API_ERROR, exc)
    return PhishGuardError(UNEXPECTED_MESSAGE, ErrorKind.UNKNOWN, exc)
