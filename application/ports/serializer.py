"""
Serializer port for user payloads (state values, invoke bodies, events).
"""
from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class Serializer(Protocol):
    def dumps(self, obj: Any) -> bytes: ...

    def loads(self, data: bytes, value_type: Optional[type] = None) -> Any: ...
