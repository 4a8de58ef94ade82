"""Token providers for the `dapr-api-token` call header."""
from __future__ import annotations

import os
from typing import Optional

from core.config import settings


class EnvironmentTokenProvider:
    """Reads the token from the process environment on every call.

    An unset or empty variable means no token.
    """

    def __init__(self, env_var: Optional[str] = None) -> None:
        self.env_var = env_var or settings.sidecar.api_token_env

    def get_token(self) -> Optional[str]:
        return os.environ.get(self.env_var) or None


class StaticTokenProvider:
    def __init__(self, token: Optional[str]) -> None:
        self._token = token

    def get_token(self) -> Optional[str]:
        return self._token
