"""Resolved request parameters.

Derived from a config and platform snapshot by the parameter resolver and
never mutated afterwards.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field

from authsession.models.config import ResponseType


@dataclass(frozen=True)
class ResolvedParameters:
    """Effective, provider-compliant request parameters."""

    client_id: str
    client_id_slot: str
    redirect_uri: str
    scopes: tuple[str, ...]
    response_type: ResponseType
    extra_params: dict[str, str] = field(default_factory=dict)
    use_pkce: bool = True
    client_secret: str | None = field(default=None, repr=False)

    @property
    def scope(self) -> str:
        """Scopes in wire format."""
        return " ".join(self.scopes)

    @property
    def identity(self) -> str:
        """Stable identity of the request these parameters describe.

        Two resolutions with the same identity produce interchangeable
        requests. The client secret is not part of the digest.
        """
        payload = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scopes": sorted(self.scopes),
            "response_type": self.response_type.value,
            "extra_params": self.extra_params,
            "use_pkce": self.use_pkce,
            "has_client_secret": self.client_secret is not None,
        }
        encoded = json.dumps(payload, sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()
