"""Value objects for service invocation through the sidecar."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import grpc

from domain.common.exceptions import ensure_not_empty

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_GRPC = "application/grpc"


class HTTPVerb(str, enum.Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"


class OriginKind(str, enum.Enum):
    """Whether the remote app answered as an HTTP or a gRPC service."""

    HTTP = "http"
    GRPC = "grpc"


@dataclass(frozen=True, slots=True)
class HTTPExtension:
    """HTTP semantics carried inside the gRPC invoke envelope.

    ``query_string`` keeps insertion order. ``headers`` are sent as call
    metadata. ``content_type`` of None means ``application/json``.
    """

    verb: HTTPVerb | str = HTTPVerb.POST
    query_string: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    content_type: Optional[str] = None


@dataclass(frozen=True, slots=True)
class InvocationDescriptor:
    """One call to ``method_name`` on the app registered as ``app_id``.

    ``body`` of None means no payload at all, which is not the same as an
    empty payload (``b""``).
    """

    app_id: str
    method_name: str
    body: Any = None
    http_extension: Optional[HTTPExtension] = None

    def __post_init__(self) -> None:
        ensure_not_empty(self.app_id, "app_id")
        ensure_not_empty(self.method_name, "method_name")


@dataclass(frozen=True, slots=True)
class GrpcStatusInfo:
    code: grpc.StatusCode
    message: str = ""
    inner_http_status_code: Optional[int] = None
    inner_http_error_message: Optional[str] = None


@dataclass(frozen=True, slots=True)
class InvocationResult:
    """Outcome of an invocation, complete on success and partial on failure.

    Exactly one of ``http_status_code`` / ``grpc_status`` is meaningful for a
    classified response: HTTP origin sets the former, gRPC origin the latter.
    A failed call carries ``grpc_status`` with the transport code and, when
    recoverable, the inner HTTP status of the remote service.
    """

    request: InvocationDescriptor
    body: Any = None
    headers: Dict[str, bytes] = field(default_factory=dict)
    trailers: Dict[str, bytes] = field(default_factory=dict)
    origin: Optional[OriginKind] = None
    content_type: Optional[str] = None
    http_status_code: Optional[int] = None
    grpc_status: Optional[GrpcStatusInfo] = None
