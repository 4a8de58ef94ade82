"""State store domain exports."""
from .entity import (
    BulkStateItem,
    ConcurrencyMode,
    ConsistencyMode,
    StateOptions,
    StateRecord,
    StateWriteResult,
    TransactionOperation,
    TransactionOperationType,
)

__all__ = [
    "BulkStateItem",
    "ConcurrencyMode",
    "ConsistencyMode",
    "StateOptions",
    "StateRecord",
    "StateWriteResult",
    "TransactionOperation",
    "TransactionOperationType",
]
