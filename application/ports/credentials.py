"""
Credential port: where the dispatcher gets the sidecar API token from.

The dispatcher asks on every call, so implementations decide whether the
value can change during the process lifetime.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class TokenProvider(Protocol):
    def get_token(self) -> Optional[str]: ...
