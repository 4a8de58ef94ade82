"""Pytest bootstrap configuration.

Keep the ambient API token out of tests unless a test sets it, and provide
an in-process fake sidecar on an ephemeral port.
"""
import os

os.environ.pop("DAPR_API_TOKEN", None)

import grpc  # noqa: E402
import pytest  # noqa: E402

from grpc_app import stubs  # noqa: E402
from grpc_app.client import SidecarClient  # noqa: E402
from grpc_app.interceptors.logging import LoggingInterceptor  # noqa: E402
from tests.fakes import FakeSidecar  # noqa: E402


@pytest.fixture
def fake_sidecar() -> FakeSidecar:
    return FakeSidecar()


@pytest.fixture
async def sidecar_target(fake_sidecar):
    server = grpc.aio.server()
    stubs.add_DaprServicer_to_server(fake_sidecar, server)
    port = server.add_insecure_port("127.0.0.1:0")
    await server.start()
    try:
        yield f"127.0.0.1:{port}"
    finally:
        await server.stop(grace=None)


@pytest.fixture
async def client(sidecar_target):
    channel = grpc.aio.insecure_channel(sidecar_target, interceptors=[LoggingInterceptor()])
    async with channel:
        yield SidecarClient(channel)
