import pytest
from pydantic import BaseModel

from domain.common.exceptions import SerializationException
from infrastructure.serializers.json import JsonSerializer


class Item(BaseModel):
    sku: str
    qty: int


@pytest.fixture
def serializer() -> JsonSerializer:
    return JsonSerializer()


def test_bytes_pass_through(serializer):
    assert serializer.dumps(b"\x00raw") == b"\x00raw"
    assert serializer.loads(b"\x00raw", bytes) == b"\x00raw"


def test_plain_values_are_compact_json(serializer):
    assert serializer.dumps({"a": [1, 2]}) == b'{"a":[1,2]}'
    assert serializer.dumps("hé") == '"hé"'.encode("utf-8")
    assert serializer.loads(b'{"a":[1,2]}') == {"a": [1, 2]}


def test_models_use_pydantic_codec(serializer):
    data = serializer.dumps(Item(sku="x", qty=2))
    assert serializer.loads(data, Item) == Item(sku="x", qty=2)


def test_typed_containers(serializer):
    assert serializer.loads(b"[1,2,3]", list[int]) == [1, 2, 3]
    assert serializer.loads(b"hello", str) == "hello"


def test_errors_are_wrapped(serializer):
    with pytest.raises(SerializationException):
        serializer.dumps(object())
    with pytest.raises(SerializationException):
        serializer.loads(b"{not json")
    with pytest.raises(SerializationException):
        serializer.loads(b'{"sku":"x"}', Item)
