"""Service invocation domain exports."""
from .entity import (
    CONTENT_TYPE_GRPC,
    CONTENT_TYPE_JSON,
    GrpcStatusInfo,
    HTTPExtension,
    HTTPVerb,
    InvocationDescriptor,
    InvocationResult,
    OriginKind,
)

__all__ = [
    "CONTENT_TYPE_GRPC",
    "CONTENT_TYPE_JSON",
    "GrpcStatusInfo",
    "HTTPExtension",
    "HTTPVerb",
    "InvocationDescriptor",
    "InvocationResult",
    "OriginKind",
]
