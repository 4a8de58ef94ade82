"""Async client for the sidecar's gRPC API.

Covers service invocation (HTTP- or gRPC-fronted apps), the state store
with etag-based optimistic concurrency, pub/sub publish, output bindings
and secrets. All calls share one channel; each call is an independent
coroutine and nothing is retried.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

import grpc

from application.ports.credentials import TokenProvider
from application.ports.serializer import Serializer
from core.config import SidecarSettings
from core.logging_config import get_logger
from domain.common.exceptions import (
    EmptyCollectionException,
    InvocationException,
    MissingArgumentException,
    ensure_not_empty,
)
from domain.invocation.entity import (
    GrpcStatusInfo,
    HTTPExtension,
    InvocationDescriptor,
    InvocationResult,
)
from domain.state.entity import (
    BulkStateItem,
    ConsistencyMode,
    StateOptions,
    StateRecord,
    StateWriteResult,
    TransactionOperation,
)
from grpc_app import stubs
from grpc_app.channel import create_channel
from grpc_app.classifier import classify, extract_error_info, metadata_to_dict
from grpc_app.dispatcher import CallDispatcher
from grpc_app.mappers.invocation import build_invoke_request, unpack_body
from grpc_app.mappers.state import (
    build_state_item,
    build_state_options,
    build_transaction_request,
    to_proto_consistency,
)
from grpc_app.mappers.status import grpc_to_http_status
from infrastructure.credentials import EnvironmentTokenProvider
from infrastructure.serializers.json import JsonSerializer


logger = get_logger(__name__)


class SidecarClient:
    def __init__(
        self,
        channel: Optional[grpc.aio.Channel] = None,
        *,
        config: Optional[SidecarSettings] = None,
        token_provider: Optional[TokenProvider] = None,
        serializer: Optional[Serializer] = None,
        default_timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            channel: an open channel to reuse; when omitted one is created
                from ``config`` and closed by `close`.
            config: sidecar address/TLS settings, defaults to ``settings.sidecar``.
            token_provider: source of the API token, read on every call.
                Defaults to the environment variable named in config.
            serializer: codec for user payloads, JSON by default.
            default_timeout: deadline in seconds for calls that pass none.
                Falls back to ``config.default_timeout``, then to
                ``settings.sidecar.default_timeout``.
        """
        self._owns_channel = channel is None
        self._channel = channel if channel is not None else create_channel(config)
        self._dispatcher = CallDispatcher(
            self._channel,
            token_provider or EnvironmentTokenProvider(config.api_token_env if config else None),
            default_timeout=(
                default_timeout
                if default_timeout is not None
                else (config.default_timeout if config is not None else None)
            ),
        )
        self._serializer: Serializer = serializer or JsonSerializer()

    @property
    def dispatcher(self) -> CallDispatcher:
        return self._dispatcher

    async def close(self) -> None:
        if self._owns_channel:
            await self._channel.close()

    async def __aenter__(self) -> "SidecarClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ============= Publish =============

    async def publish_event(
        self,
        pubsub_name: str,
        topic: str,
        data: Any = None,
        *,
        metadata: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        ensure_not_empty(pubsub_name, "pubsub_name")
        ensure_not_empty(topic, "topic")
        request = stubs.PublishEventRequest(pubsub_name=pubsub_name, topic=topic)
        if data is not None:
            request.data = self._serializer.dumps(data)
        if metadata:
            request.metadata.update(metadata)
        await self._dispatcher.call("PublishEvent", request, timeout=timeout)

    # ============= Bindings =============

    async def invoke_binding(
        self,
        name: str,
        operation: str,
        data: Any = None,
        *,
        metadata: Optional[Mapping[str, str]] = None,
        response_type: Optional[type] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Invoke an output binding; returns the decoded response payload or None."""
        ensure_not_empty(name, "name")
        ensure_not_empty(operation, "operation")
        request = stubs.InvokeBindingRequest(name=name, operation=operation)
        if data is not None:
            request.data = self._serializer.dumps(data)
        if metadata:
            request.metadata.update(metadata)
        response = await self._dispatcher.call("InvokeBinding", request, timeout=timeout)
        if not response.data:
            return None
        return self._serializer.loads(response.data, response_type)

    # ============= Service invocation =============

    async def invoke_method_with_response(
        self,
        descriptor: InvocationDescriptor,
        *,
        response_type: Optional[type] = None,
        timeout: Optional[float] = None,
    ) -> InvocationResult:
        """Invoke a method on another app and report how it answered.

        Raises:
            InvocationException: the call failed. ``exc.result`` keeps the
                headers and trailers that came back and, when the sidecar
                reached an HTTP app that returned an error, its status code
                and message in ``exc.result.grpc_status``.
        """
        request, headers = build_invoke_request(descriptor, self._serializer)
        try:
            raw = await self._dispatcher.dispatch(
                "InvokeService", request, headers=headers, timeout=timeout
            )
        except grpc.aio.AioRpcError as exc:
            raise self._invocation_failure(descriptor, exc) from exc

        kind = classify(raw.headers, raw.code, raw.details)
        return InvocationResult(
            request=descriptor,
            body=unpack_body(raw.response.data, response_type, self._serializer),
            headers=raw.headers,
            trailers=raw.trailers,
            origin=kind.origin,
            content_type=kind.content_type,
            http_status_code=kind.http_status_code,
            grpc_status=kind.grpc_status,
        )

    def _invocation_failure(
        self, descriptor: InvocationDescriptor, exc: grpc.aio.AioRpcError
    ) -> InvocationException:
        headers = metadata_to_dict(exc.initial_metadata())
        trailers = metadata_to_dict(exc.trailing_metadata())
        inner = extract_error_info(trailers)
        status = GrpcStatusInfo(
            code=exc.code(),
            message=exc.details() or "",
            inner_http_status_code=inner.status_code if inner else None,
            inner_http_error_message=inner.message if inner else None,
        )
        partial = InvocationResult(
            request=descriptor,
            headers=headers,
            trailers=trailers,
            grpc_status=status,
        )
        logger.info(
            "invocation_failed",
            app_id=descriptor.app_id,
            method=descriptor.method_name,
            status=status.code.name,
            http_status=grpc_to_http_status(status.code),
            inner_http_status_code=status.inner_http_status_code,
        )
        return InvocationException(
            f"Exception while invoking {descriptor.method_name} on appId:{descriptor.app_id}",
            result=partial,
            rpc_error=exc,
        )

    async def invoke_method(
        self,
        app_id: str,
        method_name: str,
        data: Any = None,
        *,
        http_extension: Optional[HTTPExtension] = None,
        response_type: Optional[type] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Invoke a method and return only the decoded response body."""
        result = await self.invoke_method_with_response(
            InvocationDescriptor(app_id, method_name, data, http_extension),
            response_type=response_type,
            timeout=timeout,
        )
        return result.body

    async def invoke_method_raw(
        self,
        app_id: str,
        method_name: str,
        data: Optional[bytes] = None,
        *,
        http_extension: Optional[HTTPExtension] = None,
        timeout: Optional[float] = None,
    ) -> Optional[bytes]:
        return await self.invoke_method(
            app_id,
            method_name,
            data,
            http_extension=http_extension,
            response_type=bytes,
            timeout=timeout,
        )

    # ============= State =============

    def _get_state_request(
        self,
        store_name: str,
        key: str,
        consistency: Optional[ConsistencyMode | str],
        metadata: Optional[Mapping[str, str]],
    ) -> Any:
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        request = stubs.GetStateRequest(store_name=store_name, key=key)
        if consistency is not None:
            request.consistency = to_proto_consistency(consistency)
        if metadata:
            request.metadata.update(metadata)
        return request

    async def get_state(
        self,
        store_name: str,
        key: str,
        *,
        consistency: Optional[ConsistencyMode | str] = None,
        metadata: Optional[Mapping[str, str]] = None,
        value_type: Optional[type] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """Return the decoded value for ``key``, or None when it has none."""
        value, _ = await self.get_state_and_etag(
            store_name,
            key,
            consistency=consistency,
            metadata=metadata,
            value_type=value_type,
            timeout=timeout,
        )
        return value

    async def get_state_and_etag(
        self,
        store_name: str,
        key: str,
        *,
        consistency: Optional[ConsistencyMode | str] = None,
        metadata: Optional[Mapping[str, str]] = None,
        value_type: Optional[type] = None,
        timeout: Optional[float] = None,
    ) -> tuple[Any, str]:
        request = self._get_state_request(store_name, key, consistency, metadata)
        response = await self._dispatcher.call("GetState", request, timeout=timeout)
        if not response.data:
            return None, response.etag
        return self._serializer.loads(response.data, value_type), response.etag

    async def get_bulk_state(
        self,
        store_name: str,
        keys: Sequence[str],
        *,
        parallelism: Optional[int] = None,
        metadata: Optional[Mapping[str, str]] = None,
        value_type: Optional[type] = None,
        timeout: Optional[float] = None,
    ) -> list[BulkStateItem]:
        """Read several keys in one call.

        ``parallelism`` is passed through to the sidecar as a hint; None
        sends 0, which lets the sidecar pick.
        """
        ensure_not_empty(store_name, "store_name")
        if not keys:
            raise EmptyCollectionException("keys")
        request = stubs.GetBulkStateRequest(
            store_name=store_name,
            keys=list(keys),
            parallelism=parallelism or 0,
        )
        if metadata:
            request.metadata.update(metadata)
        response = await self._dispatcher.call("GetBulkState", request, timeout=timeout)
        return [
            BulkStateItem(
                key=item.key,
                value=self._serializer.loads(item.data, value_type) if item.data else None,
                etag=item.etag,
            )
            for item in response.items
        ]

    def _save_state_request(
        self,
        store_name: str,
        key: str,
        value: Any,
        etag: Optional[str],
        options: Optional[StateOptions],
        metadata: Optional[Mapping[str, str]],
    ) -> Any:
        record = StateRecord(
            key=key,
            value=self._serializer.dumps(value) if value is not None else None,
            etag=etag,
            metadata=dict(metadata or {}),
        )
        return stubs.SaveStateRequest(
            store_name=store_name,
            states=[build_state_item(record, options)],
        )

    async def save_state(
        self,
        store_name: str,
        key: str,
        value: Any,
        *,
        options: Optional[StateOptions] = None,
        metadata: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        request = self._save_state_request(store_name, key, value, None, options, metadata)
        await self._dispatcher.call("SaveState", request, timeout=timeout)

    async def try_save_state(
        self,
        store_name: str,
        key: str,
        value: Any,
        etag: Optional[str],
        *,
        options: Optional[StateOptions] = None,
        metadata: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> StateWriteResult:
        """Save ``value`` only if the stored etag still matches ``etag``.

        A transport failure (etag mismatch included) is absorbed and
        reported as a falsy result; argument and serialization errors
        still raise.
        """
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        request = self._save_state_request(store_name, key, value, etag, options, metadata)
        try:
            await self._dispatcher.call("SaveState", request, timeout=timeout)
        except grpc.RpcError as exc:
            logger.debug("state_try_save_rejected", store_name=store_name, key=key, error=str(exc))
            return StateWriteResult(ok=False, error=exc)
        return StateWriteResult(ok=True)

    def _delete_state_request(
        self,
        store_name: str,
        key: str,
        etag: Optional[str],
        options: Optional[StateOptions],
        metadata: Optional[Mapping[str, str]],
    ) -> Any:
        request = stubs.DeleteStateRequest(store_name=store_name, key=key)
        if etag is not None:
            request.etag.value = etag
        if options is not None:
            request.options.CopyFrom(build_state_options(options))
        if metadata:
            request.metadata.update(metadata)
        return request

    async def delete_state(
        self,
        store_name: str,
        key: str,
        *,
        options: Optional[StateOptions] = None,
        metadata: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        request = self._delete_state_request(store_name, key, None, options, metadata)
        await self._dispatcher.call("DeleteState", request, timeout=timeout)

    async def try_delete_state(
        self,
        store_name: str,
        key: str,
        etag: Optional[str],
        *,
        options: Optional[StateOptions] = None,
        metadata: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> StateWriteResult:
        """Delete ``key`` only if the stored etag still matches ``etag``.

        Unlike `try_save_state`, any failure after argument validation is
        absorbed, not only transport failures.
        """
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        try:
            request = self._delete_state_request(store_name, key, etag, options, metadata)
            await self._dispatcher.call("DeleteState", request, timeout=timeout)
        except Exception as exc:  # noqa: BLE001
            logger.debug("state_try_delete_rejected", store_name=store_name, key=key, error=str(exc))
            return StateWriteResult(ok=False, error=exc)
        return StateWriteResult(ok=True)

    async def execute_state_transaction(
        self,
        store_name: str,
        operations: Sequence[TransactionOperation],
        *,
        metadata: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """Apply upserts and deletes in the given order, atomically if the store supports it.

        ``metadata`` goes on the transaction envelope; each operation keeps
        its own etag, metadata and options.
        """
        ensure_not_empty(store_name, "store_name")
        if operations is None:
            raise MissingArgumentException("operations")
        if len(operations) == 0:
            raise EmptyCollectionException("operations")
        request = build_transaction_request(store_name, operations, metadata)
        await self._dispatcher.call("ExecuteStateTransaction", request, timeout=timeout)

    # ============= Secrets =============

    async def get_secret(
        self,
        store_name: str,
        key: str,
        *,
        metadata: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> dict[str, str]:
        ensure_not_empty(store_name, "store_name")
        ensure_not_empty(key, "key")
        request = stubs.GetSecretRequest(store_name=store_name, key=key)
        if metadata:
            request.metadata.update(metadata)
        response = await self._dispatcher.call("GetSecret", request, timeout=timeout)
        return dict(response.data)
