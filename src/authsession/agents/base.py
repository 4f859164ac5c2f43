"""User-agent interface and redirect parsing.

A user-agent opens the authorization URL, lets the user interact with the
provider, and reports how the interaction ended. It only ever sees the URL,
never the request descriptor and its secrets.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol
from urllib.parse import parse_qs, urlparse

from authsession.models.errors import UserAgentError
from authsession.models.flow import (
    AuthorizationDismissed,
    AuthorizationFailure,
    AuthorizationResult,
    AuthorizationSuccess,
    PromptOptions,
)

logger = logging.getLogger(__name__)


class UserAgent(Protocol):
    """Protocol for launching the authorization prompt.

    Allows different strategies for browser interaction:
    - Manual (hand the URL to the developer)
    - System browser with a loopback redirect
    - Custom UI integration
    """

    async def open(
        self, url: str, options: PromptOptions | None = None
    ) -> AuthorizationResult:
        """Open `url` and return the outcome of the interaction."""
        ...


def parse_redirect_url(url: str) -> AuthorizationSuccess | AuthorizationFailure:
    """Parse a provider redirect into a result.

    Parameters are read from both the query and the fragment, since implicit
    flows return credentials in the fragment. Fragment values win.

    Raises:
        UserAgentError: If the URL cannot be parsed
    """
    try:
        parsed = urlparse(url)
        params: dict[str, str] = {}
        for component in (parsed.query, parsed.fragment):
            for key, values in parse_qs(component).items():
                if values:
                    params[key] = values[0]
    except ValueError as e:
        raise UserAgentError(f"Failed to parse redirect URL: {e}") from e

    if "error" in params:
        return AuthorizationFailure(
            error=params["error"],
            description=params.get("error_description"),
            uri=params.get("error_uri"),
            params=params,
            url=url,
        )

    return AuthorizationSuccess(params=params, url=url)


class CallbackUrlAgent:
    """User-agent that delegates the interaction to a caller coroutine.

    The handler receives the authorization URL and returns the redirect URL
    it ended on, or None if the user gave up. Suitable for CLI tools and
    custom integrations.
    """

    def __init__(self, callback_handler: Callable[[str], Awaitable[str | None]]):
        self.callback_handler = callback_handler

    async def open(
        self, url: str, options: PromptOptions | None = None
    ) -> AuthorizationResult:
        callback_url = await self.callback_handler(url)
        if callback_url is None:
            logger.info("Authorization prompt dismissed by the user")
            return AuthorizationDismissed()
        return parse_redirect_url(callback_url)
