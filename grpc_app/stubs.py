"""Re-exports of the generated sidecar wire types.

The runtime API stubs are the ones published with the ``dapr`` package;
this module gives the rest of the client one import path for them.

Usage:
    from grpc_app import stubs
    stub = stubs.DaprStub(channel)
    request = stubs.GetStateRequest(store_name="s", key="k")
"""

from dapr.proto.common.v1 import common_pb2
from dapr.proto.common.v1.common_pb2 import (
    Etag,
    HTTPExtension,
    InvokeRequest,
    InvokeResponse,
    StateItem,
    StateOptions,
)
from dapr.proto.runtime.v1 import dapr_pb2
from dapr.proto.runtime.v1.dapr_pb2 import (
    DeleteStateRequest,
    ExecuteStateTransactionRequest,
    GetBulkStateRequest,
    GetBulkStateResponse,
    GetSecretRequest,
    GetSecretResponse,
    GetStateRequest,
    GetStateResponse,
    InvokeBindingRequest,
    InvokeBindingResponse,
    InvokeServiceRequest,
    PublishEventRequest,
    SaveStateRequest,
    TransactionalStateOperation,
)
from dapr.proto.runtime.v1.dapr_pb2_grpc import (
    DaprServicer,
    DaprStub,
    add_DaprServicer_to_server,
)

__all__ = [
    "common_pb2",
    "dapr_pb2",
    # Common messages
    "Etag",
    "HTTPExtension",
    "InvokeRequest",
    "InvokeResponse",
    "StateItem",
    "StateOptions",
    # Runtime messages
    "DeleteStateRequest",
    "ExecuteStateTransactionRequest",
    "GetBulkStateRequest",
    "GetBulkStateResponse",
    "GetSecretRequest",
    "GetSecretResponse",
    "GetStateRequest",
    "GetStateResponse",
    "InvokeBindingRequest",
    "InvokeBindingResponse",
    "InvokeServiceRequest",
    "PublishEventRequest",
    "SaveStateRequest",
    "TransactionalStateOperation",
    # Service
    "DaprServicer",
    "DaprStub",
    "add_DaprServicer_to_server",
]
