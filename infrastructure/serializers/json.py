from __future__ import annotations

import json
from typing import Any, Optional

from pydantic import BaseModel, TypeAdapter

from domain.common.exceptions import SerializationException


class JsonSerializer:
    """JSON codec for user payloads.

    ``bytes`` pass through untouched in both directions, pydantic models use
    their own JSON codec, and any other ``value_type`` is validated through a
    pydantic ``TypeAdapter``.
    """

    def dumps(self, obj: Any) -> bytes:
        if isinstance(obj, (bytes, bytearray, memoryview)):
            return bytes(obj)
        try:
            if isinstance(obj, BaseModel):
                return obj.model_dump_json().encode("utf-8")
            return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode(
                "utf-8"
            )
        except Exception as e:  # noqa: BLE001
            raise SerializationException(str(e), details={"type": type(obj).__name__}) from e

    def loads(self, data: bytes, value_type: Optional[type] = None) -> Any:
        if value_type is bytes:
            return bytes(data)
        try:
            if value_type is str:
                return data.decode("utf-8")
            if value_type is None:
                return json.loads(data.decode("utf-8"))
            if isinstance(value_type, type) and issubclass(value_type, BaseModel):
                return value_type.model_validate_json(data)
            return TypeAdapter(value_type).validate_json(data)
        except Exception as e:  # noqa: BLE001
            raise SerializationException(str(e), details={"value_type": repr(value_type)}) from e
