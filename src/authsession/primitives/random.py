"""Cryptographically secure random string primitive."""

from __future__ import annotations

import secrets


async def generate_hex_string(byte_length: int) -> str:
    """Generate a random hex string from `byte_length` secure random bytes.

    The result is `2 * byte_length` characters long.

    Raises:
        ValueError: If byte_length is not positive
    """
    if byte_length <= 0:
        raise ValueError("byte_length must be positive")
    return secrets.token_hex(byte_length)
