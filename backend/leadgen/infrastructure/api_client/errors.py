"""
API Client Errors
"""
from leadgen.domain.models.request_outcome import (
    ClassifiedError,
    ErrorPresentation,
    RequestOutcome,
)


class RequestFailure(Exception):
    """
    Raised by a single request attempt.

    Carries the decoded outcome; the retry coordinator classifies it.
    """

    def __init__(self, outcome: RequestOutcome):
        self.outcome = outcome
        super().__init__(repr(outcome))


class RequestError(Exception):
    """
    Raised once retries are exhausted or the failure is not retryable.

    `classification.presentation` is ready to show to the user.
    """

    def __init__(self, classification: ClassifiedError, attempts: int):
        self.classification = classification
        self.attempts = attempts
        super().__init__(
            f"{classification.presentation.title} after {attempts} attempt(s)"
            + (f": {classification.detail}" if classification.detail else "")
        )

    @property
    def retryable(self) -> bool:
        return self.classification.retryable

    @property
    def status(self):
        return self.classification.status

    @property
    def presentation(self) -> ErrorPresentation:
        return self.classification.presentation


class AmbiguousPhoneError(ValueError):
    """Phone number only canonicalized by guessing the country code"""

    def __init__(self, raw: str, guessed: str):
        self.raw = raw
        self.guessed = guessed
        super().__init__(f"Unrecognized phone number format '{raw}' (would assume {guessed})")


class IdentityNotFoundError(Exception):
    """
    Login identifier did not match any tenant or agent.

    Definitive: the user has to enter something else, so it is never retried.
    """

    def __init__(self, identifier: str, kind: str = "agent"):
        self.identifier = identifier
        self.kind = kind
        super().__init__(f"{kind.capitalize()} not found for '{identifier}'")
