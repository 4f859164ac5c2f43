"""Parameter resolution for authorization requests.

Turns a partial configuration and a platform snapshot into the effective
request parameters. Resolution is pure: it performs no I/O and does not
inspect the running environment.
"""

from __future__ import annotations

import logging

from authsession.models.config import AuthorizationRequestConfig, Prompt
from authsession.models.errors import MissingClientIdError
from authsession.models.params import ResolvedParameters
from authsession.models.platform import PlatformProfile
from authsession.providers.policy import ProviderPolicy
from authsession.services.redirect import make_redirect_uri, native_redirect_uri

logger = logging.getLogger(__name__)


class ParameterResolver:
    """Applies a provider policy to caller configuration.

    Handles:
    - Scope augmentation with the provider's required scopes
    - Client id slot selection per platform
    - Redirect URI defaults
    - PKCE and client-secret policy per response type
    - Mapping of provider hints onto extra parameters
    """

    def __init__(self, policy: ProviderPolicy):
        self.policy = policy

    def resolve(
        self, config: AuthorizationRequestConfig, platform: PlatformProfile
    ) -> ResolvedParameters:
        """Resolve effective parameters for one config and platform snapshot.

        Raises:
            MissingClientIdError: If no client id exists for the platform slot
            RedirectUriError: If no redirect URI can be derived
        """
        slot, client_id = self.resolve_client_id(config, platform)

        resolved = ResolvedParameters(
            client_id=client_id,
            client_id_slot=slot,
            redirect_uri=self.resolve_redirect_uri(config, platform),
            scopes=self.policy.augment_scopes(config.scopes),
            response_type=config.response_type,
            extra_params=self.resolve_extra_params(config),
            use_pkce=self.resolve_use_pkce(config),
            client_secret=self.resolve_client_secret(config),
        )

        logger.debug(
            f"Resolved {self.policy.name} request for slot {slot}: "
            f"response_type={resolved.response_type.value} "
            f"scope={resolved.scope!r} pkce={resolved.use_pkce}"
        )
        return resolved

    def resolve_client_id(
        self, config: AuthorizationRequestConfig, platform: PlatformProfile
    ) -> tuple[str, str]:
        """Pick the platform slot's client id if set, else the generic one."""
        slot = platform.client_id_slot
        client_id = getattr(config, slot, None)
        if client_id is None:
            client_id = config.client_id
        if not client_id:
            raise MissingClientIdError(slot)
        return slot, client_id

    def resolve_redirect_uri(
        self, config: AuthorizationRequestConfig, platform: PlatformProfile
    ) -> str:
        if config.redirect_uri is not None:
            return config.redirect_uri
        native = native_redirect_uri(platform.app_id) if platform.app_id else None
        return make_redirect_uri(native, platform)

    def resolve_use_pkce(self, config: AuthorizationRequestConfig) -> bool:
        return config.use_pkce and self.policy.supports_pkce(config.response_type)

    def resolve_client_secret(self, config: AuthorizationRequestConfig) -> str | None:
        if config.client_secret is None:
            return None
        if not self.policy.allows_client_secret(config.response_type):
            logger.warning(
                f"Dropping client secret for {config.response_type.value} flow: "
                f"{self.policy.name} rejects secrets sent from public clients"
            )
            return None
        return config.client_secret

    def resolve_extra_params(self, config: AuthorizationRequestConfig) -> dict[str, str]:
        """Merge provider hints into the caller's extra parameters.

        Only the provider's parameter name is sent for each hint. A key the
        caller set explicitly in `extra_params` is never overwritten.
        """
        output = dict(config.extra_params)

        derived: dict[str, str] = {}
        if config.language:
            derived[self.policy.language_param] = config.language
        if config.login_hint:
            derived[self.policy.login_hint_param] = config.login_hint
        if config.select_account:
            derived["prompt"] = Prompt.SELECT_ACCOUNT.value
        elif config.prompt is not None:
            derived["prompt"] = config.prompt.value

        for key, value in derived.items():
            if key in output:
                logger.debug(f"Keeping caller-supplied extra param {key!r}")
                continue
            output[key] = value

        return output
