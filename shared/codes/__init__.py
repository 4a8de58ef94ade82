"""
Shared error codes used across layers (Domain/gRPC client).

Every `SidecarException` carries one of these so callers can branch on a
stable number instead of parsing messages.
"""
from enum import IntEnum


class ErrorCode(IntEnum):
    """Unified client error codes (single source of truth)."""

    # Success
    SUCCESS = 0

    # Argument errors (1xxxx)
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_EMPTY_COLLECTION = 10002
    UNSUPPORTED_VARIANT = 10003

    # Payload errors (2xxxx)
    SERIALIZATION_ERROR = 20000

    # Remote errors (4xxxx)
    INVOCATION_ERROR = 40000
    SIDECAR_UNAVAILABLE = 40001
    MALFORMED_RESPONSE = 40002


__all__ = ["ErrorCode"]
