"""Provider discovery document model.

Static endpoint configuration for an identity provider. Values are taken as
supplied; the request engine does not validate reachability.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class DiscoveryDocument(BaseModel):
    """Endpoint URLs published by an OpenID Connect provider."""

    model_config = ConfigDict(frozen=True)

    authorization_endpoint: str
    token_endpoint: str | None = None
    revocation_endpoint: str | None = None
    userinfo_endpoint: str | None = None
    issuer: str | None = None

    @field_validator("authorization_endpoint")
    @classmethod
    def validate_authorization_endpoint(cls, v: str) -> str:
        if not v:
            raise ValueError("authorization_endpoint is required")
        return v

    @classmethod
    def from_openid_configuration(cls, data: dict[str, Any]) -> DiscoveryDocument:
        """Build a document from an `openid-configuration` response body.

        Unknown keys are ignored.
        """
        return cls(
            authorization_endpoint=data.get("authorization_endpoint", ""),
            token_endpoint=data.get("token_endpoint"),
            revocation_endpoint=data.get("revocation_endpoint"),
            userinfo_endpoint=data.get("userinfo_endpoint"),
            issuer=data.get("issuer"),
        )
