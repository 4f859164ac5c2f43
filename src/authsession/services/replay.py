"""Replay-protection secrets for authorization requests.

Generates the PKCE pair, OpenID nonce and CSRF state for a request
instance. PKCE pairs and nonces are generated once per instance and reused
on rebuild; the CSRF state is minted for every build.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping

from authsession.models.errors import OAuth2Error, PKCEError
from authsession.models.security import PKCEParameters, ReplaySecrets
from authsession.primitives.pkce import generate_pkce_pair
from authsession.primitives.random import generate_hex_string
from authsession.services.security import generate_state

logger = logging.getLogger(__name__)

HexStringGenerator = Callable[[int], Awaitable[str]]
PKCEGenerator = Callable[[], Awaitable[PKCEParameters]]


class ReplayProtectionManager:
    """Owns generation of per-request replay-protection secrets.

    The secure-random and PKCE primitives are injected so tests and
    alternative crypto backends can supply their own.
    """

    def __init__(
        self,
        hex_generator: HexStringGenerator = generate_hex_string,
        pkce_generator: PKCEGenerator = generate_pkce_pair,
        state_generator: Callable[[], str] = generate_state,
        nonce_byte_length: int = 16,
    ):
        self._hex_generator = hex_generator
        self._pkce_generator = pkce_generator
        self._state_generator = state_generator
        self.nonce_byte_length = nonce_byte_length

    async def ensure_nonce(
        self,
        previous: ReplaySecrets | None,
        extra_params: Mapping[str, str],
        byte_length: int | None = None,
    ) -> str:
        """Return the instance's nonce, generating it only if none exists.

        A caller-supplied `nonce` extra parameter wins over a previously
        generated one, which wins over generating a new one.
        """
        supplied = extra_params.get("nonce")
        if supplied:
            return supplied
        if previous is not None and previous.nonce:
            return previous.nonce

        length = byte_length or self.nonce_byte_length
        try:
            nonce = await self._hex_generator(length)
        except Exception as e:
            raise OAuth2Error(f"Failed to generate nonce: {e}") from e
        if not nonce:
            raise OAuth2Error("Secure random source returned an empty nonce")

        logger.debug(f"Generated {length}-byte nonce")
        return nonce

    async def ensure_pkce(self, previous: ReplaySecrets | None) -> PKCEParameters:
        """Return the instance's PKCE pair, generating it only if none exists."""
        if previous is not None and previous.pkce is not None:
            return previous.pkce
        return await self.generate_pkce_pair()

    async def generate_pkce_pair(self) -> PKCEParameters:
        try:
            return await self._pkce_generator()
        except PKCEError:
            raise
        except Exception as e:
            raise PKCEError(f"Failed to generate PKCE parameters: {e}") from e

    def generate_csrf_state(self) -> str:
        return self._state_generator()
