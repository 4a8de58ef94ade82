from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from domain.common.exceptions import UnsupportedVariantException
from domain.state.entity import (
    ConcurrencyMode,
    ConsistencyMode,
    StateOptions,
    StateRecord,
    TransactionOperation,
    TransactionOperationType,
)
from grpc_app import stubs


_CONSISTENCY_TO_PROTO = {
    ConsistencyMode.EVENTUAL: stubs.StateOptions.CONSISTENCY_EVENTUAL,
    ConsistencyMode.STRONG: stubs.StateOptions.CONSISTENCY_STRONG,
}

_CONCURRENCY_TO_PROTO = {
    ConcurrencyMode.FIRST_WRITE: stubs.StateOptions.CONCURRENCY_FIRST_WRITE,
    ConcurrencyMode.LAST_WRITE: stubs.StateOptions.CONCURRENCY_LAST_WRITE,
}


def to_proto_consistency(mode: ConsistencyMode | str) -> int:
    try:
        return _CONSISTENCY_TO_PROTO[ConsistencyMode(mode)]
    except (ValueError, KeyError):
        raise UnsupportedVariantException("Consistency mode", mode) from None


def to_proto_concurrency(mode: ConcurrencyMode | str) -> int:
    try:
        return _CONCURRENCY_TO_PROTO[ConcurrencyMode(mode)]
    except (ValueError, KeyError):
        raise UnsupportedVariantException("Concurrency mode", mode) from None


def to_operation_tag(kind: TransactionOperationType | str) -> str:
    try:
        return TransactionOperationType(kind).value
    except ValueError:
        raise UnsupportedVariantException("Transaction operation", kind) from None


def build_state_options(options: StateOptions) -> Any:
    proto = stubs.StateOptions()
    if options.consistency is not None:
        proto.consistency = to_proto_consistency(options.consistency)
    if options.concurrency is not None:
        proto.concurrency = to_proto_concurrency(options.concurrency)
    return proto


def build_state_item(
    record: StateRecord,
    options: Optional[StateOptions] = None,
) -> Any:
    item = stubs.StateItem(key=record.key)
    if record.value is not None:
        item.value = record.value
    if record.etag is not None:
        item.etag.value = record.etag
    if record.metadata:
        item.metadata.update(record.metadata)
    if options is not None:
        item.options.CopyFrom(build_state_options(options))
    return item


def build_transaction_request(
    store_name: str,
    operations: Sequence[TransactionOperation],
    metadata: Optional[Mapping[str, str]] = None,
) -> Any:
    """Operations keep their order; envelope metadata is set once for all."""
    request = stubs.ExecuteStateTransactionRequest(storeName=store_name)
    for op in operations:
        request.operations.append(
            stubs.TransactionalStateOperation(
                operationType=to_operation_tag(op.operation_type),
                request=build_state_item(op.record, op.options),
            )
        )
    if metadata:
        request.metadata.update(metadata)
    return request
