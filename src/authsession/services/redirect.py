"""Redirect URI strategy.

Chooses between the proxy, web-origin and native redirect URIs for a
platform profile.
"""

from __future__ import annotations

from authsession.models.errors import RedirectUriError
from authsession.models.platform import HostPlatform, PlatformProfile


def native_redirect_uri(app_id: str) -> str:
    """Redirect URI using the application id as a private-use URI scheme."""
    return f"{app_id}:/oauthredirect"


def make_redirect_uri(
    native: str | None, platform: PlatformProfile, path: str = ""
) -> str:
    """Derive the default redirect URI for a platform.

    Args:
        native: Redirect URI to use on native hosts
        platform: Platform profile for the request
        path: Optional path appended to a web origin

    Raises:
        RedirectUriError: If the platform offers no usable redirect URI
    """
    if platform.use_proxy:
        if not platform.proxy_redirect_uri:
            raise RedirectUriError(
                "Proxy redirect requested but the platform has no proxy_redirect_uri"
            )
        return platform.proxy_redirect_uri

    if platform.host is HostPlatform.WEB and platform.web_origin:
        return _join_origin(platform.web_origin, path)

    if native:
        return native

    if platform.web_origin:
        return _join_origin(platform.web_origin, path)

    raise RedirectUriError(
        "Cannot derive a redirect URI: set redirect_uri or provide an app id"
    )


def _join_origin(origin: str, path: str) -> str:
    origin = origin.rstrip("/")
    if not path:
        return origin
    return f"{origin}/{path.lstrip('/')}"
