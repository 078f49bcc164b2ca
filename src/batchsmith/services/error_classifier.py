"""Error classification deciding whether a failed attempt is retried."""
from typing import Callable, Iterable, Optional, Tuple
from batchsmith.core.exceptions import NonRetryableError

# Returns True when the error must fail the task without further attempts.
ErrorClassifier = Callable[[BaseException], bool]

IMMEDIATE_FAILURE_STATUS_CODES = frozenset({400, 401})
IMMEDIATE_FAILURE_MESSAGE_MARKERS: Tuple[str, ...] = ("authentication",)


def extract_status_code(error: BaseException) -> Optional[int]:
    """
    Find an HTTP-like status code on a provider error.

    Looks at ``status_code``, ``status`` and ``response.status_code``.

    Returns:
        Optional[int]: Status code, or None if the error carries none
    """
    candidates = (
        getattr(error, "status_code", None),
        getattr(error, "status", None),
        getattr(getattr(error, "response", None), "status_code", None),
    )
    for candidate in candidates:
        if isinstance(candidate, int) and not isinstance(candidate, bool):
            return candidate
    return None


def status_code_classifier(
    status_codes: Iterable[int],
    message_markers: Iterable[str] = IMMEDIATE_FAILURE_MESSAGE_MARKERS,
) -> ErrorClassifier:
    """
    Build a classifier that fails immediately on the given status codes.

    Errors raised as NonRetryableError always fail immediately.

    Args:
        status_codes: Status codes that mark a deterministic failure
        message_markers: Lower-case substrings that mark one in the message

    Returns:
        ErrorClassifier: Predicate, True for immediate failure
    """
    codes = frozenset(status_codes)
    markers = tuple(marker.lower() for marker in message_markers)

    def classify(error: BaseException) -> bool:
        if isinstance(error, NonRetryableError):
            return True
        if extract_status_code(error) in codes:
            return True
        message = str(error).lower()
        return any(marker in message for marker in markers)

    return classify


# Authentication and malformed-request errors are not retried.
should_fail_immediately: ErrorClassifier = status_code_classifier(
    IMMEDIATE_FAILURE_STATUS_CODES
)


def never_fail_immediately(error: BaseException) -> bool:
    """Classifier that retries every error."""
    return False
