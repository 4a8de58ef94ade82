from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
from urllib.parse import urlencode

from google.protobuf import any_pb2
from google.protobuf.message import Message

from application.ports.serializer import Serializer
from domain.common.exceptions import SerializationException, UnsupportedVariantException
from domain.invocation.entity import (
    CONTENT_TYPE_JSON,
    HTTPExtension,
    HTTPVerb,
    InvocationDescriptor,
)
from grpc_app import stubs


_VERB_TO_PROTO = {
    HTTPVerb.GET: stubs.HTTPExtension.GET,
    HTTPVerb.HEAD: stubs.HTTPExtension.HEAD,
    HTTPVerb.POST: stubs.HTTPExtension.POST,
    HTTPVerb.PUT: stubs.HTTPExtension.PUT,
    HTTPVerb.DELETE: stubs.HTTPExtension.DELETE,
    HTTPVerb.CONNECT: stubs.HTTPExtension.CONNECT,
    HTTPVerb.OPTIONS: stubs.HTTPExtension.OPTIONS,
    HTTPVerb.TRACE: stubs.HTTPExtension.TRACE,
}


def to_proto_verb(verb: HTTPVerb | str) -> int:
    try:
        return _VERB_TO_PROTO[HTTPVerb(verb)]
    except (ValueError, KeyError):
        raise UnsupportedVariantException("HTTP verb", verb) from None


@dataclass(slots=True)
class MappedExtension:
    extension: Any  # stubs.HTTPExtension
    content_type: str
    headers: dict[str, str] = field(default_factory=dict)


def build_http_extension(ext: Optional[HTTPExtension]) -> MappedExtension:
    """Map the HTTP-like descriptor onto the wire extension.

    Without an extension the call is a JSON POST with no query string and
    no extra headers.
    """
    if ext is None:
        return MappedExtension(
            extension=stubs.HTTPExtension(verb=stubs.HTTPExtension.POST),
            content_type=CONTENT_TYPE_JSON,
        )

    proto_ext = stubs.HTTPExtension(verb=to_proto_verb(ext.verb))
    if ext.query_string:
        proto_ext.querystring = urlencode(list(ext.query_string.items()))
    return MappedExtension(
        extension=proto_ext,
        content_type=ext.content_type or CONTENT_TYPE_JSON,
        headers=dict(ext.headers or {}),
    )


def pack_body(body: Any, serializer: Serializer) -> Optional[any_pb2.Any]:
    if body is None:
        return None
    data = any_pb2.Any()
    if isinstance(body, Message):
        data.Pack(body)
    else:
        data.value = serializer.dumps(body)
    return data


def unpack_body(data: any_pb2.Any, response_type: Optional[type], serializer: Serializer) -> Any:
    """Decode the response payload; an empty payload decodes to None."""
    if isinstance(response_type, type) and issubclass(response_type, Message):
        if not data.type_url and not data.value:
            return None
        msg = response_type()
        if data.type_url:
            if not data.Unpack(msg):
                raise SerializationException(
                    f"Response holds {data.type_url}, expected {msg.DESCRIPTOR.full_name}",
                    details={"type_url": data.type_url},
                )
        else:
            msg.ParseFromString(data.value)
        return msg
    if not data.value:
        return None
    return serializer.loads(data.value, response_type)


def build_invoke_request(
    descriptor: InvocationDescriptor, serializer: Serializer
) -> tuple[Any, dict[str, str]]:
    """Return the InvokeServiceRequest and the headers to send with it."""
    mapped = build_http_extension(descriptor.http_extension)
    message = stubs.InvokeRequest(
        method=descriptor.method_name,
        content_type=mapped.content_type,
        http_extension=mapped.extension,
    )
    data = pack_body(descriptor.body, serializer)
    if data is not None:
        # An empty payload still marks the field as present
        message.data.SetInParent()
        message.data.MergeFrom(data)
    request = stubs.InvokeServiceRequest(id=descriptor.app_id, message=message)
    return request, mapped.headers
