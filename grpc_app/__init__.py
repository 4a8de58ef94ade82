"""gRPC transport layer for talking to the sidecar.

This package hosts:
- Re-exports of the generated sidecar stubs (`stubs`).
- Channel bootstrap, client interceptors and the call dispatcher.
- Mappers between domain value objects and wire envelopes.
- `SidecarClient`, the public entry point (`grpc_app.client`).
"""
