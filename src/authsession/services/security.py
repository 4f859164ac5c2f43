"""Security utilities for authorization requests.

Provides CSRF state generation and constant-time state validation.
"""

from __future__ import annotations

import secrets
import string

from authsession.models.errors import StateMismatchError, StateValidationError


def generate_state() -> str:
    """Generate cryptographically secure state parameter.

    Returns:
        Cryptographically secure random state string (32 characters)
    """
    alphabet = string.ascii_letters + string.digits + "-._~"
    return "".join(secrets.choice(alphabet) for _ in range(32))


def validate_state(expected: str, actual: str | None) -> None:
    """Validate state parameter matches expected value.

    Args:
        expected: State parameter from original authorization request
        actual: State parameter from the redirect

    Raises:
        StateValidationError: If the redirect carried no state
        StateMismatchError: If state parameters don't match
    """
    if actual is None:
        raise StateValidationError("Redirect is missing the state parameter")
    if not secrets.compare_digest(expected.encode("utf-8"), actual.encode("utf-8")):
        raise StateMismatchError("State parameter mismatch - possible CSRF attack")
