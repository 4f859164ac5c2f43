"""Authorization request construction.

Composes parameter resolution and replay protection into a ready-to-send
request descriptor.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from authsession.models.config import AuthorizationRequestConfig
from authsession.models.discovery import DiscoveryDocument
from authsession.models.flow import AuthorizationRequestDescriptor
from authsession.models.platform import PlatformProfile
from authsession.models.security import ReplaySecrets
from authsession.providers.policy import ProviderPolicy
from authsession.services.replay import ReplayProtectionManager
from authsession.services.resolver import ParameterResolver

logger = logging.getLogger(__name__)


class AuthorizationRequestBuilder:
    """Builds authorization request descriptors.

    The builder holds no per-request state. Secrets from a previous build of
    the same request instance are passed in by value so that rebuilding
    keeps the PKCE verifier and nonce while minting a fresh CSRF state.
    """

    def __init__(self, replay: ReplayProtectionManager | None = None):
        self.replay = replay or ReplayProtectionManager()

    async def build(
        self,
        config: AuthorizationRequestConfig,
        platform: PlatformProfile,
        policy: ProviderPolicy,
        previous: ReplaySecrets | None = None,
        discovery: DiscoveryDocument | None = None,
    ) -> AuthorizationRequestDescriptor:
        """Build a descriptor for one request instance.

        Args:
            config: Caller configuration
            platform: Platform profile snapshot
            policy: Provider policy to apply
            previous: Secrets of the instance's previous build, if any
            discovery: Endpoint override; defaults to the policy's document

        Raises:
            ConfigurationError: If the configuration cannot be resolved.
                Propagated unchanged from the resolver.
            PKCEError: If PKCE generation fails
        """
        params = ParameterResolver(policy).resolve(config, platform)

        pkce = previous.pkce if previous is not None else None
        if params.use_pkce:
            pkce = await self.replay.ensure_pkce(previous)

        nonce = previous.nonce if previous is not None else None
        if policy.requires_nonce(params.response_type):
            nonce = await self.replay.ensure_nonce(
                previous, params.extra_params, byte_length=policy.nonce_byte_length
            )
            if params.extra_params.get("nonce") != nonce:
                params = replace(
                    params, extra_params={**params.extra_params, "nonce": nonce}
                )

        secrets = ReplaySecrets(
            state=self.replay.generate_csrf_state(),
            pkce=pkce,
            nonce=nonce,
        )

        descriptor = AuthorizationRequestDescriptor(
            discovery=discovery or policy.discovery,
            params=params,
            secrets=secrets,
        )

        logger.debug(
            f"Built {policy.name} request {descriptor.request_id[:12]} "
            f"for client {params.client_id}"
        )
        return descriptor
