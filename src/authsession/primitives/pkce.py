"""PKCE (Proof Key for Code Exchange) primitive.

Implements RFC 7636 code verifier and S256 code challenge generation to
prevent authorization code interception attacks.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
import string

from authsession.models.errors import PKCEError
from authsession.models.security import PKCEParameters


class PKCEManager:
    """Generates PKCE verifier/challenge pairs.

    This implementation follows RFC 7636 requirements:
    - Uses S256 code challenge method (SHA256 + base64url)
    - Generates cryptographically secure code verifiers
    """

    def generate_parameters(self) -> PKCEParameters:
        """Generate a new verifier and its derived challenge.

        Returns:
            PKCEParameters: Immutable parameters for one request instance

        Raises:
            PKCEError: If parameter generation fails
        """
        try:
            code_verifier = self._generate_code_verifier()
            code_challenge = self._generate_code_challenge(code_verifier)

            return PKCEParameters(
                code_verifier=code_verifier,
                code_challenge=code_challenge,
                code_challenge_method="S256",
            )

        except Exception as e:
            raise PKCEError(f"Failed to generate PKCE parameters: {e}") from e

    def _generate_code_verifier(self) -> str:
        """Generate a cryptographically secure code verifier.

        RFC 7636 Section 4.1: code verifier must be 43-128 characters long
        and use only unreserved characters:
            [A-Z] / [a-z] / [0-9] / "-" / "." / "_" / "~"

        Returns:
            A 128-character code verifier
        """
        alphabet = string.ascii_letters + string.digits + "-._~"
        return "".join(secrets.choice(alphabet) for _ in range(128))

    def _generate_code_challenge(self, code_verifier: str) -> str:
        """BASE64URL-ENCODE(SHA256(ASCII(code_verifier))) without padding."""
        digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
        return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


_default_manager = PKCEManager()


async def generate_pkce_pair() -> PKCEParameters:
    """Generate a PKCE pair with the default manager."""
    return _default_manager.generate_parameters()
