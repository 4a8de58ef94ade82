"""Value objects for the state store: records, options, transactions."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from domain.common.exceptions import ensure_not_empty


class ConsistencyMode(str, enum.Enum):
    EVENTUAL = "eventual"
    STRONG = "strong"


class ConcurrencyMode(str, enum.Enum):
    FIRST_WRITE = "first-write"
    LAST_WRITE = "last-write"


class TransactionOperationType(str, enum.Enum):
    UPSERT = "upsert"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class StateOptions:
    consistency: Optional[ConsistencyMode | str] = None
    concurrency: Optional[ConcurrencyMode | str] = None


@dataclass(frozen=True, slots=True)
class StateRecord:
    """A key with its raw value and the etag it was read or written with.

    ``etag`` of None means the write is unconditional.
    """

    key: str
    value: Optional[bytes] = None
    etag: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        ensure_not_empty(self.key, "key")


@dataclass(frozen=True, slots=True)
class BulkStateItem:
    key: str
    value: Any
    etag: str = ""


@dataclass(frozen=True, slots=True)
class TransactionOperation:
    operation_type: TransactionOperationType | str
    record: StateRecord
    options: Optional[StateOptions] = None

    @classmethod
    def upsert(
        cls,
        key: str,
        value: Optional[bytes],
        *,
        etag: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        options: Optional[StateOptions] = None,
    ) -> "TransactionOperation":
        return cls(
            TransactionOperationType.UPSERT,
            StateRecord(key=key, value=value, etag=etag, metadata=dict(metadata or {})),
            options,
        )

    @classmethod
    def delete(
        cls,
        key: str,
        *,
        etag: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        options: Optional[StateOptions] = None,
    ) -> "TransactionOperation":
        return cls(
            TransactionOperationType.DELETE,
            StateRecord(key=key, etag=etag, metadata=dict(metadata or {})),
            options,
        )


@dataclass(frozen=True, slots=True)
class StateWriteResult:
    """Result of a conditional write that never raises.

    Truthy when the write went through. On failure ``error`` holds the
    absorbed exception so callers can still inspect it.
    """

    ok: bool
    error: Optional[BaseException] = None

    def __bool__(self) -> bool:
        return self.ok
