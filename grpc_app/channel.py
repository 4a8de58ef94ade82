from __future__ import annotations

from typing import Optional, Sequence

import grpc

from core.config import SidecarSettings, settings
from core.logging_config import get_logger
from grpc_app.interceptors.logging import LoggingInterceptor


logger = get_logger(__name__)


def _read(path: Optional[str]) -> Optional[bytes]:
    if not path:
        return None
    with open(path, "rb") as f:
        return f.read()


def create_channel(
    config: Optional[SidecarSettings] = None,
    *,
    interceptors: Optional[Sequence[grpc.aio.ClientInterceptor]] = None,
) -> grpc.aio.Channel:
    """Open the long-lived channel to the sidecar.

    One channel serves every concurrent call for the life of the process.
    """
    config = config or settings.sidecar
    options = [
        ("grpc.max_send_message_length", config.max_message_length),
        ("grpc.max_receive_message_length", config.max_message_length),
    ]
    chain = list(interceptors) if interceptors is not None else [LoggingInterceptor()]

    if config.tls.enabled:
        if bool(config.tls.cert) != bool(config.tls.key):
            raise RuntimeError("Sidecar TLS client cert and key must be provided together")
        creds = grpc.ssl_channel_credentials(
            root_certificates=_read(config.tls.ca),
            private_key=_read(config.tls.key),
            certificate_chain=_read(config.tls.cert),
        )
        channel = grpc.aio.secure_channel(config.address, creds, options=options, interceptors=chain)
    else:
        channel = grpc.aio.insecure_channel(config.address, options=options, interceptors=chain)

    logger.info("sidecar_channel_created", address=config.address, tls=config.tls.enabled)
    return channel
