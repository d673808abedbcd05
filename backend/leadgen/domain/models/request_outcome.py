"""
Request Outcome Models
Failure outcomes decoded once at the HTTP boundary, and their classification
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class TransportFailure:
    """No response was received (connection refused, DNS, reset, timeout)"""
    reason: str
    timed_out: bool = False


@dataclass(frozen=True)
class HttpStatusFailure:
    """
    A response arrived with a non-2xx status.

    error/message/code come from the `{error, message, code}` error body
    when the server sent one.
    """
    status: int
    error: Optional[str] = None
    message: Optional[str] = None
    code: Optional[str] = None


RequestOutcome = Union[TransportFailure, HttpStatusFailure]


class ErrorKind(str, Enum):
    """Classified failure kinds"""
    CONNECTION = "connection"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    RATE_LIMITED = "rate_limited"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ErrorPresentation:
    """Ready-to-present error triple (plus severity)"""
    title: str
    message: str
    action: str
    severity: str = "error"


@dataclass(frozen=True)
class ClassifiedError:
    """Classification result for a failure outcome"""
    kind: ErrorKind
    retryable: bool
    presentation: ErrorPresentation
    status: Optional[int] = None
    detail: Optional[str] = None
    code: Optional[str] = None

    @property
    def is_network_error(self) -> bool:
        return self.status is None
