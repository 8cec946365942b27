"""Local JSON API configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from linkshelf.config.base import BaseConfig


class WebAuthConfig(BaseConfig):
    """Shared-secret header check in front of every ``/links`` route."""

    enabled: bool = Field(False, description="Reject requests without the token header.")
    header_name: str = Field("X-Linkshelf-Token", description="Request header carrying the token.", min_length=1)
    token: str | None = Field(None, description="Expected token value; accepts env:VAR references.")

    @field_validator("token")
    @classmethod
    def _blank_token_is_none(cls, value: str | None) -> str | None:
        return (value or "").strip() or None

    @model_validator(mode="after")
    def _require_token(self) -> "WebAuthConfig":
        if self.enabled and self.token is None:
            raise ValueError("web.auth.token is required when web.auth.enabled is true")
        return self


class WebConfig(BaseConfig):
    """Bind address and metadata for ``linkshelf serve``."""

    host: str = Field("127.0.0.1", description="Interface the API server binds to.", min_length=1)
    port: int = Field(8000, description="Port the API server listens on.", ge=1, le=65535)
    title: str = Field("Linkshelf", description="Title reported by the OpenAPI schema.", min_length=1)
    auth: WebAuthConfig | None = Field(None, description="Optional token authentication.")


__all__ = ["WebAuthConfig", "WebConfig"]
