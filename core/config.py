"""
Client settings, loaded from the environment and `.env`.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from typing import Optional


class SidecarTlsSettings(BaseModel):
    enabled: bool = False
    ca: Optional[str] = None
    cert: Optional[str] = None
    key: Optional[str] = None


class SidecarSettings(BaseModel):
    host: str = "127.0.0.1"
    grpc_port: int = 50001
    # Name of the env var read on every call for the `dapr-api-token` header
    api_token_env: str = "DAPR_API_TOKEN"
    # Seconds; None means no deadline unless the caller passes one
    default_timeout: Optional[float] = None
    # Maps to grpc.max_send_message_length / grpc.max_receive_message_length
    max_message_length: int = 4 * 1024 * 1024
    tls: SidecarTlsSettings = Field(default_factory=SidecarTlsSettings)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.grpc_port}"

    @field_validator("default_timeout")
    @classmethod
    def _positive_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("default_timeout must be positive")
        return v


class Settings(BaseSettings):
    """Project settings."""

    PROJECT_NAME: str = Field(default="sidecar-forge")
    VERSION: str = Field(default="0.1.0")
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Optional[str] = Field(default=None, description="Overrides the DEBUG-derived level")

    sidecar: SidecarSettings = Field(default_factory=SidecarSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


settings = Settings()
