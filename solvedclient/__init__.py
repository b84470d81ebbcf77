"""Client for the solved server: tracks which (file, field) pairs are already solved."""

from .client import SolvedClient
from .endpoint import Endpoint, parse_address, resolve_endpoint
from .errors import (ConnectionFailed, HostNotFound, InvalidAddress, ProtocolMismatch,
                     RequestFailed, ResponseFailed, SolvedClientError, Timeout)

__all__ = [
    "SolvedClient",
    "Endpoint",
    "parse_address",
    "resolve_endpoint",
    "SolvedClientError",
    "InvalidAddress",
    "HostNotFound",
    "ConnectionFailed",
    "RequestFailed",
    "ResponseFailed",
    "Timeout",
    "ProtocolMismatch",
]
