"""Security-related models for authorization requests.

Contains PKCE parameters and the per-request replay-protection secrets.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PKCEParameters:
    """PKCE (Proof Key for Code Exchange) parameters (RFC 7636).

    The verifier stays with the request instance; only the challenge is
    placed in the outgoing URL.
    """

    code_verifier: str = field(repr=False)
    code_challenge: str = field()
    code_challenge_method: str = field(default="S256")

    def __post_init__(self) -> None:
        """Validate PKCE parameters meet RFC 7636 requirements."""
        if not (43 <= len(self.code_verifier) <= 128):
            raise ValueError("code_verifier must be 43-128 characters")
        if not (43 <= len(self.code_challenge) <= 128):
            raise ValueError("code_challenge must be 43-128 characters")
        if self.code_challenge_method != "S256":
            raise ValueError("Only S256 code challenge method is supported")


@dataclass(frozen=True)
class ReplaySecrets:
    """Replay-protection secrets owned by one request instance.

    `pkce` and `nonce` are generated at most once and carried by value into
    every rebuild of the same instance. `state` is minted per build.
    """

    state: str
    pkce: PKCEParameters | None = None
    nonce: str | None = field(default=None, repr=False)
