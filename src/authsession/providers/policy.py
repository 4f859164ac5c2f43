"""Provider policy values.

A provider specializes the generic request engine by supplying a policy
value: scope augmentation, nonce and client-secret predicates, PKCE support
and provider-specific parameter names.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from authsession.models.config import ResponseType
from authsession.models.discovery import DiscoveryDocument
from authsession.models.flow import PromptOptions


def merge_scopes(scopes: Sequence[str], required: Sequence[str]) -> tuple[str, ...]:
    """Union of caller scopes and required scopes without duplicates."""
    return tuple(dict.fromkeys([*scopes, *required]))


def require_scopes(*required: str) -> Callable[[Sequence[str]], tuple[str, ...]]:
    """Build a scope-augmentation function that always adds `required`."""

    def augment(scopes: Sequence[str]) -> tuple[str, ...]:
        return merge_scopes(scopes, required)

    return augment


def requires_nonce_for_id_token(response_type: ResponseType) -> bool:
    return response_type is ResponseType.ID_TOKEN


def allows_secret_for_implicit(response_type: ResponseType) -> bool:
    # Code flow secrets belong to a token exchange this engine never performs
    return response_type is not ResponseType.CODE


def supports_pkce_for_code(response_type: ResponseType) -> bool:
    # There is no code to bind a verifier to in implicit grants
    return not response_type.is_implicit


@dataclass(frozen=True)
class ProviderPolicy:
    """Provider-specific rules applied on top of the generic request."""

    name: str
    discovery: DiscoveryDocument
    augment_scopes: Callable[[Sequence[str]], tuple[str, ...]] = require_scopes()
    requires_nonce: Callable[[ResponseType], bool] = requires_nonce_for_id_token
    allows_client_secret: Callable[[ResponseType], bool] = allows_secret_for_implicit
    supports_pkce: Callable[[ResponseType], bool] = supports_pkce_for_code
    language_param: str = "hl"
    login_hint_param: str = "login_hint"
    prompt_options: PromptOptions = field(default_factory=PromptOptions)
    nonce_byte_length: int = 16
