from __future__ import annotations

import time
from typing import Any, Callable, Awaitable

import grpc

from core.logging_config import get_logger


logger = get_logger(__name__)


def _method_name(details: grpc.aio.ClientCallDetails) -> str:
    method = details.method
    return method.decode("utf-8") if isinstance(method, bytes) else str(method)


class LoggingInterceptor(grpc.aio.UnaryUnaryClientInterceptor):
    """Logs every unary call made on the sidecar channel.

    Metadata is never logged; it carries the API token.
    """

    async def intercept_unary_unary(
        self,
        continuation: Callable[[grpc.aio.ClientCallDetails, Any], Awaitable[grpc.aio.UnaryUnaryCall]],
        client_call_details: grpc.aio.ClientCallDetails,
        request: Any,
    ) -> grpc.aio.UnaryUnaryCall:
        method = _method_name(client_call_details)
        start = time.perf_counter()
        logger.debug("sidecar_call", method=method, timeout=client_call_details.timeout)
        call = await continuation(client_call_details, request)
        try:
            await call
        except grpc.aio.AioRpcError as exc:
            # The caller awaits the same call and gets the error from there
            logger.warning(
                "sidecar_call_failed",
                method=method,
                status=exc.code().name,
                details=exc.details(),
                elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
            )
        else:
            logger.debug(
                "sidecar_call_done",
                method=method,
                elapsed_ms=round((time.perf_counter() - start) * 1000, 2),
            )
        return call
