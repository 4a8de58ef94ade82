"""Client-side exceptions shared by the domain and the gRPC client.

Argument and variant errors are raised before any network call; transport
failures are `grpc.aio.AioRpcError` and are not wrapped here, except on the
invocation path where `InvocationException` keeps the partial result.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from shared.codes import ErrorCode

if TYPE_CHECKING:
    import grpc

    from domain.invocation.entity import InvocationResult


class SidecarException(Exception):
    """Base class for every error raised by the client."""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "SidecarError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class InvalidArgumentException(SidecarException, ValueError):
    def __init__(self, message: str, *, field: str | None = None, details: dict | None = None):
        super().__init__(
            code=ErrorCode.PARAM_ERROR,
            message=message,
            error_type="InvalidArgument",
            details=details,
            field=field,
        )


class MissingArgumentException(InvalidArgumentException):
    def __init__(self, field: str):
        super().__init__(f"{field} cannot be null or empty", field=field)
        self.code = ErrorCode.PARAM_MISSING


class EmptyCollectionException(InvalidArgumentException):
    def __init__(self, field: str):
        super().__init__(f"{field} does not contain any elements", field=field)
        self.code = ErrorCode.PARAM_EMPTY_COLLECTION


class UnsupportedVariantException(SidecarException, ValueError):
    def __init__(self, kind: str, value: Any):
        super().__init__(
            code=ErrorCode.UNSUPPORTED_VARIANT,
            message=f"{kind} '{value}' is not supported",
            error_type="UnsupportedVariant",
            details={"kind": kind, "value": str(value)},
        )


class SerializationException(SidecarException):
    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(
            code=ErrorCode.SERIALIZATION_ERROR,
            message=message,
            error_type="SerializationError",
            details=details,
        )


class InvocationException(SidecarException):
    """A failed service invocation, with whatever was known about the response.

    ``result`` holds the partially populated `InvocationResult`: the request,
    the headers/trailers captured from the failed call and, when the sidecar
    attached an ErrorInfo detail, the inner HTTP status and message of the
    remote service. ``rpc_error`` is the transport error (also ``__cause__``).
    """

    def __init__(
        self,
        message: str,
        *,
        result: "InvocationResult",
        rpc_error: "grpc.RpcError",
    ) -> None:
        details: dict[str, Any] = {
            "app_id": result.request.app_id,
            "method_name": result.request.method_name,
        }
        if result.grpc_status is not None:
            details["grpc_code"] = result.grpc_status.code.name
            if result.grpc_status.inner_http_status_code is not None:
                details["inner_http_status_code"] = result.grpc_status.inner_http_status_code
        unavailable = result.grpc_status is not None and result.grpc_status.code.name == "UNAVAILABLE"
        super().__init__(
            code=ErrorCode.SIDECAR_UNAVAILABLE if unavailable else ErrorCode.INVOCATION_ERROR,
            message=message,
            error_type="InvocationError",
            details=details,
        )
        self.result = result
        self.rpc_error = rpc_error


class MalformedResponseException(SidecarException):
    """The sidecar answered with a header this client cannot interpret.

    ``headers`` keeps every response header that came back with the call.
    """

    def __init__(self, header: str, value: Any, headers: Optional[dict] = None):
        super().__init__(
            code=ErrorCode.MALFORMED_RESPONSE,
            message=f"Response header '{header}' has an invalid value: {value!r}",
            error_type="MalformedResponse",
            details={"header": header, "value": value},
        )
        self.headers = dict(headers or {})


def ensure_not_empty(value: Optional[str], field: str) -> str:
    if value is None or value == "":
        raise MissingArgumentException(field)
    return value
