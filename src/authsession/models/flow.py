"""Authorization flow models.

Contains the built request descriptor, prompt options, and the typed
results a prompt can end with.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union
from urllib.parse import urlencode

from authsession.models.discovery import DiscoveryDocument
from authsession.models.params import ResolvedParameters
from authsession.models.security import ReplaySecrets

# Error codes produced locally rather than by the provider
STATE_MISMATCH = "state_mismatch"
AGENT_ERROR = "agent_error"


@dataclass(frozen=True)
class AuthorizationRequestDescriptor:
    """A fully resolved authorization request, ready to prompt with.

    Retained after prompting so the response can be validated against the
    issued state and the PKCE verifier is available for the code exchange.
    """

    discovery: DiscoveryDocument
    params: ResolvedParameters
    secrets: ReplaySecrets

    @property
    def state(self) -> str:
        return self.secrets.state

    @property
    def request_id(self) -> str:
        return self.params.identity

    @property
    def code_verifier(self) -> str | None:
        if not self.params.use_pkce or self.secrets.pkce is None:
            return None
        return self.secrets.pkce.code_verifier

    @property
    def url(self) -> str:
        return self.build_authorization_url()

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL."""
        params = {
            "response_type": self.params.response_type.value,
            "client_id": self.params.client_id,
            "redirect_uri": self.params.redirect_uri,
            "scope": self.params.scope,
            "state": self.secrets.state,
        }

        if self.params.use_pkce and self.secrets.pkce is not None:
            params["code_challenge"] = self.secrets.pkce.code_challenge
            params["code_challenge_method"] = self.secrets.pkce.code_challenge_method

        # Extra params never override the core protocol parameters
        for key, value in self.params.extra_params.items():
            params.setdefault(key, value)

        return f"{self.discovery.authorization_endpoint}?{urlencode(params)}"


@dataclass(frozen=True)
class PromptOptions:
    """Hints passed to the user-agent when prompting."""

    width: int | None = None
    height: int | None = None
    use_embedded_flow: bool = False


@dataclass(frozen=True)
class AuthorizationSuccess:
    params: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    type: Literal["success"] = "success"

    @property
    def code(self) -> str | None:
        return self.params.get("code")

    @property
    def access_token(self) -> str | None:
        return self.params.get("access_token")

    @property
    def id_token(self) -> str | None:
        return self.params.get("id_token")

    @property
    def state(self) -> str | None:
        return self.params.get("state")


@dataclass(frozen=True)
class AuthorizationFailure:
    error: str
    description: str | None = None
    uri: str | None = None
    params: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    type: Literal["error"] = "error"

    @property
    def state(self) -> str | None:
        return self.params.get("state")


@dataclass(frozen=True)
class AuthorizationCancelled:
    """The prompt was cancelled by the caller or the user-agent."""

    type: Literal["cancel"] = "cancel"


@dataclass(frozen=True)
class AuthorizationDismissed:
    """The user closed the prompt without completing it."""

    type: Literal["dismiss"] = "dismiss"


AuthorizationResult = Union[
    AuthorizationSuccess,
    AuthorizationFailure,
    AuthorizationCancelled,
    AuthorizationDismissed,
]
