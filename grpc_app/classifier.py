"""Response classification and error-detail extraction for invocations.

The sidecar fronts both HTTP and gRPC apps. It tells them apart for us:
HTTP callees get their status echoed in the ``dapr-http-status`` response
header; failures may carry a ``google.rpc.Status`` in the
``grpc-status-details-bin`` trailer whose ErrorInfo detail holds the inner
HTTP status and message of the remote app.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

import grpc
from google.protobuf.message import DecodeError
from google.rpc import error_details_pb2, status_pb2

from core.logging_config import get_logger
from domain.common.exceptions import MalformedResponseException
from domain.invocation.entity import (
    CONTENT_TYPE_GRPC,
    CONTENT_TYPE_JSON,
    GrpcStatusInfo,
    OriginKind,
)


logger = get_logger(__name__)

DAPR_HTTP_STATUS_HEADER = "dapr-http-status"
GRPC_STATUS_DETAILS_KEY = "grpc-status-details-bin"
ERROR_INFO_TYPE_NAME = "google.rpc.ErrorInfo"
ERROR_INFO_HTTP_CODE = "http.code"
ERROR_INFO_HTTP_MESSAGE = "http.error_message"

MetadataValue = Union[str, bytes]


def metadata_to_dict(metadata: Optional[Iterable[tuple[str, MetadataValue]]]) -> dict[str, bytes]:
    """Flatten call metadata into ``{key: raw bytes}``; last value wins."""
    result: dict[str, bytes] = {}
    for key, value in metadata or ():
        result[key] = value if isinstance(value, bytes) else value.encode("utf-8")
    return result


@dataclass(frozen=True, slots=True)
class Classification:
    origin: OriginKind
    content_type: str
    http_status_code: Optional[int] = None
    grpc_status: Optional[GrpcStatusInfo] = None


def _parse_http_status(raw: bytes, headers: dict[str, bytes]) -> int:
    try:
        return int(raw.decode("ascii").strip())
    except ValueError:
        raise MalformedResponseException(DAPR_HTTP_STATUS_HEADER, raw, headers) from None


def classify(
    headers: dict[str, bytes],
    code: grpc.StatusCode,
    details: Optional[str],
) -> Classification:
    raw = headers.get(DAPR_HTTP_STATUS_HEADER)
    if raw is not None:
        return Classification(
            origin=OriginKind.HTTP,
            content_type=CONTENT_TYPE_JSON,
            http_status_code=_parse_http_status(raw, headers),
        )
    return Classification(
        origin=OriginKind.GRPC,
        content_type=CONTENT_TYPE_GRPC,
        grpc_status=GrpcStatusInfo(code=code, message=details or ""),
    )


@dataclass(frozen=True, slots=True)
class InnerHttpError:
    status_code: Optional[int] = None
    message: Optional[str] = None


def _type_name(type_url: str) -> str:
    return type_url.rsplit("/", 1)[-1]


def extract_error_info(trailers: dict[str, bytes]) -> Optional[InnerHttpError]:
    """Recover the remote app's HTTP status from a failed call's trailers.

    Returns None when the trailer is missing, cannot be parsed, or has no
    ErrorInfo detail.
    """
    raw = trailers.get(GRPC_STATUS_DETAILS_KEY)
    if raw is None:
        return None
    try:
        status = status_pb2.Status.FromString(raw)
    except DecodeError:
        logger.debug("status_details_unparseable", size=len(raw))
        return None

    found: Optional[InnerHttpError] = None
    for detail in status.details:
        if _type_name(detail.type_url) != ERROR_INFO_TYPE_NAME:
            continue
        info = error_details_pb2.ErrorInfo()
        if not detail.Unpack(info):
            continue
        http_code: Optional[int] = None
        code_text = info.metadata.get(ERROR_INFO_HTTP_CODE)
        if code_text is not None:
            try:
                http_code = int(code_text)
            except ValueError:
                logger.debug("error_info_bad_http_code", value=code_text)
        found = InnerHttpError(
            status_code=http_code,
            message=info.metadata.get(ERROR_INFO_HTTP_MESSAGE),
        )
    return found
