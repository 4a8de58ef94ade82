"""Process-wide sidecar client lifecycle.

Same pattern as other long-lived clients: init once at startup, fetch with
`get_sidecar_client`, shut down on exit.
"""
from typing import Optional

from core.config import SidecarSettings
from core.logging_config import get_logger
from grpc_app.client import SidecarClient

logger = get_logger(__name__)

_sidecar_client: Optional[SidecarClient] = None


async def init_sidecar_client(config: Optional[SidecarSettings] = None, **kwargs) -> SidecarClient:
    """Create the shared client; a second call returns the existing one."""
    global _sidecar_client

    if _sidecar_client is not None:
        logger.warning("sidecar_client_already_initialized")
        return _sidecar_client

    _sidecar_client = SidecarClient(config=config, **kwargs)
    logger.info("sidecar_client_initialized")
    return _sidecar_client


def get_sidecar_client() -> SidecarClient:
    if _sidecar_client is None:
        raise RuntimeError(
            "Sidecar client not initialized. "
            "Call init_sidecar_client() during startup."
        )
    return _sidecar_client


async def shutdown_sidecar_client() -> None:
    global _sidecar_client

    if _sidecar_client is None:
        return
    try:
        await _sidecar_client.close()
        logger.info("sidecar_client_shutdown")
    finally:
        _sidecar_client = None
