"""
API Client Package
Resilient client for the lead collection API
"""
from .errors import (
    AmbiguousPhoneError,
    IdentityNotFoundError,
    RequestError,
    RequestFailure,
)
from .executor import RequestExecutor
from .retry import (
    InFlightTracker,
    RetryConfig,
    compute_delay_ms,
    execute_with_retry,
)
from .session_context import (
    FileSessionStore,
    InMemorySessionStore,
    SessionContext,
    SessionStore,
)
from .client import LeadGenClient

__all__ = [
    "AmbiguousPhoneError",
    "IdentityNotFoundError",
    "RequestError",
    "RequestFailure",
    "RequestExecutor",
    "InFlightTracker",
    "RetryConfig",
    "compute_delay_ms",
    "execute_with_retry",
    "FileSessionStore",
    "InMemorySessionStore",
    "SessionContext",
    "SessionStore",
    "LeadGenClient",
]
