"""In-memory stand-in for the sidecar's gRPC API."""
from __future__ import annotations

from typing import Awaitable, Callable, Optional

import grpc
from google.protobuf import empty_pb2

from grpc_app import stubs


InvokeHandler = Callable[[object, grpc.aio.ServicerContext], Awaitable[object]]


class FakeSidecar(stubs.DaprServicer):
    """State store with etags, echoing invoke, recorded publish/binding calls.

    Etags are a global counter rendered as a string, so every write yields
    a fresh etag. Set ``fail_with`` to make every call abort with that code.
    """

    def __init__(self) -> None:
        self.state: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.secrets: dict[tuple[str, str], dict[str, str]] = {}
        self.requests: dict[str, object] = {}
        self.metadata: dict[str, dict[str, str]] = {}
        self.published: list[object] = []
        self.invoke_handler: Optional[InvokeHandler] = None
        self.fail_with: Optional[grpc.StatusCode] = None
        self._version = 0

    async def _enter(self, name: str, request, context) -> None:
        self.requests[name] = request
        self.metadata[name] = {k: v for k, v in (context.invocation_metadata() or ())}
        if self.fail_with is not None:
            await context.abort(self.fail_with, "sidecar unavailable")

    def _next_etag(self) -> str:
        self._version += 1
        return str(self._version)

    async def _check_etag(self, store: str, key: str, etag, context) -> None:
        current = self.state.get((store, key))
        if current is None or current[1] != etag.value:
            await context.abort(grpc.StatusCode.ABORTED, f"possible etag mismatch for {key}")

    async def GetState(self, request, context):  # type: ignore[override]
        await self._enter("GetState", request, context)
        data, etag = self.state.get((request.store_name, request.key), (b"", ""))
        return stubs.GetStateResponse(data=data, etag=etag)

    async def GetBulkState(self, request, context):  # type: ignore[override]
        await self._enter("GetBulkState", request, context)
        items = []
        for key in request.keys:
            data, etag = self.state.get((request.store_name, key), (b"", ""))
            items.append(stubs.dapr_pb2.BulkStateItem(key=key, data=data, etag=etag))
        return stubs.GetBulkStateResponse(items=items)

    async def SaveState(self, request, context):  # type: ignore[override]
        await self._enter("SaveState", request, context)
        for item in request.states:
            if item.HasField("etag"):
                await self._check_etag(request.store_name, item.key, item.etag, context)
        for item in request.states:
            self.state[(request.store_name, item.key)] = (item.value, self._next_etag())
        return empty_pb2.Empty()

    async def DeleteState(self, request, context):  # type: ignore[override]
        await self._enter("DeleteState", request, context)
        if request.HasField("etag"):
            await self._check_etag(request.store_name, request.key, request.etag, context)
        self.state.pop((request.store_name, request.key), None)
        return empty_pb2.Empty()

    async def ExecuteStateTransaction(self, request, context):  # type: ignore[override]
        await self._enter("ExecuteStateTransaction", request, context)
        for op in request.operations:
            key = (request.storeName, op.request.key)
            if op.operationType == "upsert":
                self.state[key] = (op.request.value, self._next_etag())
            elif op.operationType == "delete":
                self.state.pop(key, None)
            else:
                await context.abort(grpc.StatusCode.INVALID_ARGUMENT, op.operationType)
        return empty_pb2.Empty()

    async def PublishEvent(self, request, context):  # type: ignore[override]
        await self._enter("PublishEvent", request, context)
        self.published.append(request)
        return empty_pb2.Empty()

    async def InvokeBinding(self, request, context):  # type: ignore[override]
        await self._enter("InvokeBinding", request, context)
        return stubs.InvokeBindingResponse(data=request.data, metadata=dict(request.metadata))

    async def GetSecret(self, request, context):  # type: ignore[override]
        await self._enter("GetSecret", request, context)
        return stubs.GetSecretResponse(data=self.secrets.get((request.store_name, request.key), {}))

    async def InvokeService(self, request, context):  # type: ignore[override]
        await self._enter("InvokeService", request, context)
        if self.invoke_handler is not None:
            return await self.invoke_handler(request, context)
        response = stubs.InvokeResponse(content_type=request.message.content_type)
        if request.message.HasField("data"):
            response.data.CopyFrom(request.message.data)
        return response
