"""Platform capability profile.

Resolved once at startup and passed into the resolver so the resolver
itself never inspects the running environment.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum


class HostPlatform(str, Enum):
    """Host operating system families that select a client id slot."""

    IOS = "ios"
    ANDROID = "android"
    WEB = "web"
    DESKTOP = "desktop"


# Client id slot per host. Hosts without a dedicated slot use the web one.
CLIENT_ID_SLOTS: dict[HostPlatform, str] = {
    HostPlatform.IOS: "ios_client_id",
    HostPlatform.ANDROID: "android_client_id",
    HostPlatform.WEB: "web_client_id",
    HostPlatform.DESKTOP: "web_client_id",
}

PROXY_CLIENT_ID_SLOT = "proxy_client_id"


@dataclass(frozen=True)
class PlatformProfile:
    """Read-only snapshot of the platform the request is built for."""

    host: HostPlatform
    use_proxy: bool = False
    app_id: str | None = None
    proxy_redirect_uri: str | None = None
    web_origin: str | None = None

    @property
    def client_id_slot(self) -> str:
        """Name of the config field holding this platform's client id."""
        if self.use_proxy:
            return PROXY_CLIENT_ID_SLOT
        return CLIENT_ID_SLOTS[self.host]

    @classmethod
    def detect(cls, app_id: str | None = None) -> PlatformProfile:
        """Build a profile for the current interpreter's host."""
        if sys.platform == "ios":
            host = HostPlatform.IOS
        elif sys.platform == "android":
            host = HostPlatform.ANDROID
        elif sys.platform == "emscripten":
            host = HostPlatform.WEB
        else:
            host = HostPlatform.DESKTOP
        return cls(host=host, use_proxy=False, app_id=app_id)
