"""Caller-supplied configuration for an authorization request.

The configuration is partial: client ids are given per platform slot and
resolved against a platform profile at build time.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResponseType(str, Enum):
    """OAuth response types supported by the request engine."""

    CODE = "code"
    TOKEN = "token"
    ID_TOKEN = "id_token"

    @property
    def is_implicit(self) -> bool:
        """Implicit grants return credentials directly in the redirect."""
        return self is not ResponseType.CODE


class Prompt(str, Enum):
    """OpenID Connect `prompt` values."""

    NONE = "none"
    LOGIN = "login"
    CONSENT = "consent"
    SELECT_ACCOUNT = "select_account"


class AuthorizationRequestConfig(BaseModel):
    """Partial authorization request configuration."""

    model_config = ConfigDict(frozen=True)

    # Client id slots
    client_id: str | None = None
    proxy_client_id: str | None = None
    ios_client_id: str | None = None
    android_client_id: str | None = None
    web_client_id: str | None = None

    # Only attached for implicit response types
    client_secret: str | None = None

    scopes: list[str] = Field(default_factory=list)
    response_type: ResponseType = ResponseType.CODE
    redirect_uri: str | None = None
    extra_params: dict[str, str] = Field(default_factory=dict)
    use_pkce: bool = True
    prompt: Prompt | None = None

    # Provider policy hints
    language: str | None = None
    login_hint: str | None = None
    select_account: bool = False

    @field_validator("scopes")
    @classmethod
    def validate_scopes(cls, v: list[str]) -> list[str]:
        """Scopes are space-joined on the wire, so they cannot contain spaces."""
        for scope in v:
            if not scope or any(ch.isspace() for ch in scope):
                raise ValueError(f"Invalid scope value: {scope!r}")
        return v
