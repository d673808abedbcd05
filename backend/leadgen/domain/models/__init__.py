"""Domain models"""

from .tenant import Tenant, TenantLoginRequest
from .agent import Agent, AgentCreate, AgentUpdate
from .record import GeoFix, Record, RecordCreate
from .request_outcome import (
    TransportFailure,
    HttpStatusFailure,
    RequestOutcome,
    ErrorKind,
    ErrorPresentation,
    ClassifiedError,
)

__all__ = [
    "Tenant",
    "TenantLoginRequest",
    "Agent",
    "AgentCreate",
    "AgentUpdate",
    "GeoFix",
    "Record",
    "RecordCreate",
    "TransportFailure",
    "HttpStatusFailure",
    "RequestOutcome",
    "ErrorKind",
    "ErrorPresentation",
    "ClassifiedError",
]
