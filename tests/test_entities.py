import pytest

from domain.common.exceptions import (
    EmptyCollectionException,
    InvalidArgumentException,
    MissingArgumentException,
    ensure_not_empty,
)
from domain.invocation.entity import HTTPExtension, HTTPVerb, InvocationDescriptor
from domain.state.entity import (
    StateRecord,
    StateWriteResult,
    TransactionOperation,
    TransactionOperationType,
)
from shared.codes import ErrorCode


@pytest.mark.parametrize("app_id,method", [("", "m"), (None, "m"), ("app", ""), ("app", None)])
def test_descriptor_requires_app_and_method(app_id, method):
    with pytest.raises(MissingArgumentException):
        InvocationDescriptor(app_id, method)


def test_descriptor_defaults():
    d = InvocationDescriptor("app", "m")
    assert d.body is None
    assert d.http_extension is None
    assert HTTPExtension().verb is HTTPVerb.POST


def test_record_key_required():
    with pytest.raises(MissingArgumentException) as exc:
        StateRecord(key="")
    assert exc.value.field == "key"
    assert exc.value.message == "key cannot be null or empty"
    assert exc.value.code == ErrorCode.PARAM_MISSING


def test_argument_errors_are_value_errors():
    assert issubclass(MissingArgumentException, ValueError)
    assert issubclass(EmptyCollectionException, InvalidArgumentException)
    assert str(EmptyCollectionException("keys")) == "keys does not contain any elements"


def test_ensure_not_empty_passes_value_through():
    assert ensure_not_empty("x", "f") == "x"
    with pytest.raises(MissingArgumentException):
        ensure_not_empty("", "f")


def test_transaction_factories():
    up = TransactionOperation.upsert("k", b"v", etag="1", metadata={"a": "b"})
    assert up.operation_type is TransactionOperationType.UPSERT
    assert up.record.value == b"v"
    assert up.record.etag == "1"
    assert up.record.metadata == {"a": "b"}

    rm = TransactionOperation.delete("k")
    assert rm.operation_type is TransactionOperationType.DELETE
    assert rm.record.value is None
    assert rm.record.etag is None


def test_write_result_truthiness():
    assert StateWriteResult(ok=True)
    err = RuntimeError("x")
    failed = StateWriteResult(ok=False, error=err)
    assert not failed
    assert failed.error is err


def test_static_and_environment_token_providers(monkeypatch):
    from infrastructure.credentials import EnvironmentTokenProvider, StaticTokenProvider

    assert StaticTokenProvider("t").get_token() == "t"
    provider = EnvironmentTokenProvider("SIDECAR_TEST_TOKEN")
    monkeypatch.delenv("SIDECAR_TEST_TOKEN", raising=False)
    assert provider.get_token() is None
    monkeypatch.setenv("SIDECAR_TEST_TOKEN", "")
    assert provider.get_token() is None
    monkeypatch.setenv("SIDECAR_TEST_TOKEN", "abc")
    assert provider.get_token() == "abc"
