"""
Error Classifier
Maps a decoded failure outcome to an error kind, a retryability flag and a
user-facing presentation.

Classification is a pure function of the outcome. It never looks at how
many attempts were made; the retry coordinator owns that.
"""
from typing import Dict, Tuple

from leadgen.domain.models.request_outcome import (
    ClassifiedError,
    ErrorKind,
    ErrorPresentation,
    HttpStatusFailure,
    RequestOutcome,
    TransportFailure,
)


# Retryable outcomes
CONNECTION_PROBLEM = ErrorPresentation(
    title="Connection Problem",
    message="Unable to connect to the server. Please check your internet connection and try again.",
    action="Retry",
)
REQUEST_TIMED_OUT = ErrorPresentation(
    title="Request Timed Out",
    message="The server took too long to respond. Please try again.",
    action="Retry",
    severity="warning",
)
SERVER_ERROR = ErrorPresentation(
    title="Server Error",
    message="Something went wrong on our end. Please try again in a few moments.",
    action="Retry",
)
SERVICE_UNAVAILABLE = ErrorPresentation(
    title="Service Unavailable",
    message="The service is temporarily unavailable. Please try again later.",
    action="Retry",
)
TOO_MANY_REQUESTS = ErrorPresentation(
    title="Too Many Requests",
    message="You're making requests too quickly. Please wait a moment and try again.",
    action="Try Again Later",
    severity="warning",
)

# Status -> (kind, retryable, presentation) for codes with a fixed meaning
STATUS_TABLE: Dict[int, Tuple[ErrorKind, bool, ErrorPresentation]] = {
    400: (ErrorKind.BAD_REQUEST, False, ErrorPresentation(
        title="Invalid Data",
        message="The information provided is invalid. Please check your entries and try again.",
        action="Fix and Retry",
    )),
    401: (ErrorKind.UNAUTHORIZED, False, ErrorPresentation(
        title="Authentication Required",
        message="You need to sign in to access this feature.",
        action="Sign In",
        severity="warning",
    )),
    403: (ErrorKind.FORBIDDEN, False, ErrorPresentation(
        title="Access Denied",
        message="You don't have permission to perform this action.",
        action="Contact Support",
    )),
    404: (ErrorKind.NOT_FOUND, False, ErrorPresentation(
        title="Not Found",
        message="The requested information could not be found.",
        action="Go Back",
    )),
    408: (ErrorKind.TIMEOUT, True, REQUEST_TIMED_OUT),
    409: (ErrorKind.CONFLICT, False, ErrorPresentation(
        title="Conflict",
        message="This data conflicts with existing information. Please check and try again.",
        action="Review and Retry",
        severity="warning",
    )),
    429: (ErrorKind.RATE_LIMITED, True, TOO_MANY_REQUESTS),
    500: (ErrorKind.SERVER_ERROR, True, SERVER_ERROR),
}


def classify(outcome: RequestOutcome) -> ClassifiedError:
    """
    Classify a failure outcome.

    Args:
        outcome: TransportFailure or HttpStatusFailure decoded at the boundary

    Returns:
        ClassifiedError with kind, retryable flag and presentation
    """
    if isinstance(outcome, TransportFailure):
        if outcome.timed_out:
            return ClassifiedError(
                kind=ErrorKind.TIMEOUT,
                retryable=True,
                presentation=REQUEST_TIMED_OUT,
                detail=outcome.reason,
            )
        return ClassifiedError(
            kind=ErrorKind.CONNECTION,
            retryable=True,
            presentation=CONNECTION_PROBLEM,
            detail=outcome.reason,
        )

    if not isinstance(outcome, HttpStatusFailure):
        raise TypeError(f"Unsupported outcome type: {type(outcome).__name__}")

    detail = outcome.error or outcome.message

    if outcome.status in STATUS_TABLE:
        kind, retryable, presentation = STATUS_TABLE[outcome.status]
    elif outcome.status >= 500:
        kind, retryable, presentation = ErrorKind.SERVICE_UNAVAILABLE, True, SERVICE_UNAVAILABLE
    else:
        # Unknown status: not retried automatically, but still offers a manual retry
        kind, retryable = ErrorKind.UNKNOWN, False
        presentation = ErrorPresentation(
            title="Request Failed",
            message=outcome.message or outcome.error or "An unexpected error occurred. Please try again.",
            action="Retry",
        )

    return ClassifiedError(
        kind=kind,
        retryable=retryable,
        presentation=presentation,
        status=outcome.status,
        detail=detail,
        code=outcome.code,
    )


def is_retryable(outcome: RequestOutcome) -> bool:
    """Shortcut for classify(outcome).retryable"""
    return classify(outcome).retryable
