from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import grpc

from application.ports.credentials import TokenProvider
from core.config import settings
from core.logging_config import get_logger
from grpc_app import stubs
from grpc_app.classifier import metadata_to_dict


logger = get_logger(__name__)

API_TOKEN_META_KEY = "dapr-api-token"


@dataclass(slots=True)
class RawCall:
    """Everything the transport told us about one completed unary call."""

    response: Any
    headers: dict[str, bytes] = field(default_factory=dict)
    trailers: dict[str, bytes] = field(default_factory=dict)
    code: grpc.StatusCode = grpc.StatusCode.OK
    details: Optional[str] = None


class CallDispatcher:
    """Issues unary calls on the sidecar stub with per-call metadata.

    The API token is looked up through ``token_provider`` on every call. A
    failed call raises ``grpc.aio.AioRpcError`` untouched: it already carries
    the status code, details, headers and trailers, and deciding what a
    failure means is up to the caller. Nothing is retried.
    """

    def __init__(
        self,
        channel: grpc.aio.Channel,
        token_provider: TokenProvider,
        *,
        default_timeout: Optional[float] = None,
    ) -> None:
        self._stub = stubs.DaprStub(channel)
        self._token_provider = token_provider
        self._default_timeout = (
            default_timeout if default_timeout is not None else settings.sidecar.default_timeout
        )

    def build_metadata(self, headers: Optional[Mapping[str, str]] = None) -> list[tuple[str, str]]:
        md: list[tuple[str, str]] = [(k.lower(), v) for k, v in (headers or {}).items()]
        token = self._token_provider.get_token()
        if token is not None:
            md.append((API_TOKEN_META_KEY, token))
        return md

    async def dispatch(
        self,
        method: str,
        request: Any,
        *,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> RawCall:
        rpc = getattr(self._stub, method)
        call = rpc(
            request,
            metadata=self.build_metadata(headers),
            timeout=timeout if timeout is not None else self._default_timeout,
        )
        response = await call
        return RawCall(
            response=response,
            headers=metadata_to_dict(await call.initial_metadata()),
            trailers=metadata_to_dict(await call.trailing_metadata()),
            code=await call.code(),
            details=await call.details(),
        )

    async def call(self, method: str, request: Any, **kwargs: Any) -> Any:
        return (await self.dispatch(method, request, **kwargs)).response
