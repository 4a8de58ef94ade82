import pytest

from domain.common.exceptions import UnsupportedVariantException
from domain.invocation.entity import HTTPExtension, HTTPVerb, InvocationDescriptor
from domain.state.entity import (
    ConcurrencyMode,
    ConsistencyMode,
    StateOptions,
    StateRecord,
    TransactionOperation,
)
from grpc_app import stubs
from grpc_app.mappers.invocation import build_http_extension, build_invoke_request, to_proto_verb
from grpc_app.mappers.state import (
    build_state_item,
    build_state_options,
    build_transaction_request,
    to_proto_concurrency,
    to_proto_consistency,
)
from infrastructure.serializers.json import JsonSerializer


@pytest.mark.parametrize(
    "verb,expected",
    [
        (HTTPVerb.GET, stubs.HTTPExtension.GET),
        (HTTPVerb.HEAD, stubs.HTTPExtension.HEAD),
        (HTTPVerb.POST, stubs.HTTPExtension.POST),
        (HTTPVerb.PUT, stubs.HTTPExtension.PUT),
        (HTTPVerb.DELETE, stubs.HTTPExtension.DELETE),
        (HTTPVerb.CONNECT, stubs.HTTPExtension.CONNECT),
        (HTTPVerb.OPTIONS, stubs.HTTPExtension.OPTIONS),
        (HTTPVerb.TRACE, stubs.HTTPExtension.TRACE),
        ("PUT", stubs.HTTPExtension.PUT),
    ],
)
def test_verb_mapping(verb, expected):
    assert to_proto_verb(verb) == expected


@pytest.mark.parametrize("verb", ["PATCH", "get", ""])
def test_unknown_verb_is_rejected(verb):
    with pytest.raises(UnsupportedVariantException):
        to_proto_verb(verb)


def test_no_extension_defaults_to_json_post():
    mapped = build_http_extension(None)
    assert mapped.extension.verb == stubs.HTTPExtension.POST
    assert mapped.extension.querystring == ""
    assert mapped.content_type == "application/json"
    assert mapped.headers == {}


def test_extension_without_content_type_defaults_to_json():
    mapped = build_http_extension(HTTPExtension(verb=HTTPVerb.DELETE, headers={"a": "b"}))
    assert mapped.extension.verb == stubs.HTTPExtension.DELETE
    assert mapped.content_type == "application/json"
    assert mapped.headers == {"a": "b"}


def test_query_string_keeps_order_and_escapes():
    mapped = build_http_extension(HTTPExtension(query_string={"z": "1", "a": "x y", "m": "&"}))
    assert mapped.extension.querystring == "z=1&a=x+y&m=%26"


def test_invoke_request_envelope():
    request, headers = build_invoke_request(
        InvocationDescriptor("app", "m", {"k": 1}, HTTPExtension(verb=HTTPVerb.PUT, headers={"h": "v"})),
        JsonSerializer(),
    )
    assert request.id == "app"
    assert request.message.method == "m"
    assert request.message.data.value == b'{"k":1}'
    assert request.message.http_extension.verb == stubs.HTTPExtension.PUT
    assert headers == {"h": "v"}


def test_consistency_and_concurrency_mapping():
    assert to_proto_consistency(ConsistencyMode.EVENTUAL) == stubs.StateOptions.CONSISTENCY_EVENTUAL
    assert to_proto_consistency("strong") == stubs.StateOptions.CONSISTENCY_STRONG
    assert to_proto_concurrency(ConcurrencyMode.FIRST_WRITE) == stubs.StateOptions.CONCURRENCY_FIRST_WRITE
    assert to_proto_concurrency("last-write") == stubs.StateOptions.CONCURRENCY_LAST_WRITE


def test_unknown_modes_are_rejected():
    with pytest.raises(UnsupportedVariantException):
        to_proto_consistency("bounded")
    with pytest.raises(UnsupportedVariantException):
        to_proto_concurrency("whatever")
    with pytest.raises(UnsupportedVariantException):
        build_state_options(StateOptions(concurrency="nope"))


def test_partial_options_leave_other_field_unspecified():
    proto = build_state_options(StateOptions(consistency=ConsistencyMode.STRONG))
    assert proto.consistency == stubs.StateOptions.CONSISTENCY_STRONG
    assert proto.concurrency == stubs.StateOptions.CONCURRENCY_UNSPECIFIED


def test_state_item_without_etag_is_unconditional():
    item = build_state_item(StateRecord(key="k", value=b"1"))
    assert not item.HasField("etag")
    assert not item.HasField("options")

    item = build_state_item(StateRecord(key="k", value=None, etag="3"))
    assert item.etag.value == "3"
    assert item.value == b""


def test_transaction_rejects_unknown_operation():
    op = TransactionOperation("merge", StateRecord(key="k"))
    with pytest.raises(UnsupportedVariantException):
        build_transaction_request("s", [op])
