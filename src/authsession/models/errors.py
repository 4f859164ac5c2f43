"""Exception hierarchy for authorization request errors.

Provides specific exception types for different failure modes so callers
can tell configuration problems apart from protocol and user-agent failures.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all authorization request errors."""

    pass


class ConfigurationError(OAuth2Error):
    """Raised when the request configuration cannot produce a valid request."""

    pass


class MissingClientIdError(ConfigurationError):
    """Raised when no client id is configured for the active platform slot.

    This is a blocking precondition failure. It is never retried or defaulted.
    """

    def __init__(self, slot: str):
        self.slot = slot
        super().__init__(
            f"Client id property `{slot}` must be defined to use this provider "
            "on this platform."
        )


class RedirectUriError(ConfigurationError):
    """Raised when no redirect URI can be derived for the platform."""

    pass


class PKCEError(OAuth2Error):
    """Raised when PKCE parameter generation fails."""

    pass


class DiscoveryError(OAuth2Error):
    """Raised when a provider discovery document cannot be loaded."""

    pass


class StateValidationError(OAuth2Error):
    """Raised when OAuth state parameter validation fails.

    This indicates either a missing state parameter or a state mismatch,
    which could indicate a CSRF attack or a stale redirect.
    """

    pass


class StateMismatchError(StateValidationError):
    """Raised when the returned state differs from the issued state."""

    pass


class RequestStateError(OAuth2Error):
    """Raised when a controller operation is invalid in its current status."""

    pass


class RequestNotLoadedError(RequestStateError):
    """Raised when prompting before a request has been loaded."""

    pass


class PromptInProgressError(RequestStateError):
    """Raised when a second prompt is started for the same request."""

    pass


class UserAgentError(OAuth2Error):
    """Raised when the user-agent fails instead of returning a result."""

    pass
