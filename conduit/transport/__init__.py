"""
conduit.transport - Transport Client

Scoped, authenticated access to the external HTTP API.

Architecture:
- types.py: RawResponse, CallOutcome, TransportFailure
- client.py: ApiClient (httpx session, retry, pagination)
"""

from .client import IDEMPOTENT_METHODS, ApiClient
from .types import CallOutcome, RawResponse, TransportFailure

__all__ = [
    "IDEMPOTENT_METHODS",
    "ApiClient",
    "CallOutcome",
    "RawResponse",
    "TransportFailure",
]
