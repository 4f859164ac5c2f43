"""Google identity provider.

Google requires the OpenID profile scopes on every request, rejects client
secrets on code flows sent from public clients, and uses `hl` for the
language hint.
"""

from __future__ import annotations

from authsession.agents.base import UserAgent
from authsession.models.config import AuthorizationRequestConfig
from authsession.models.discovery import DiscoveryDocument
from authsession.models.flow import PromptOptions
from authsession.models.platform import PlatformProfile
from authsession.providers.policy import ProviderPolicy, require_scopes
from authsession.services.builder import AuthorizationRequestBuilder
from authsession.services.controller import AuthRequestController

GOOGLE_MINIMUM_SCOPES = (
    "openid",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
)

GOOGLE_DISCOVERY = DiscoveryDocument(
    issuer="https://accounts.google.com",
    authorization_endpoint="https://accounts.google.com/o/oauth2/v2/auth",
    token_endpoint="https://oauth2.googleapis.com/token",
    revocation_endpoint="https://oauth2.googleapis.com/revoke",
    userinfo_endpoint="https://openidconnect.googleapis.com/v1/userinfo",
)

GOOGLE_POLICY = ProviderPolicy(
    name="google",
    discovery=GOOGLE_DISCOVERY,
    augment_scopes=require_scopes(*GOOGLE_MINIMUM_SCOPES),
    language_param="hl",
    login_hint_param="login_hint",
    prompt_options=PromptOptions(width=515, height=680),
)


def create_controller(
    config: AuthorizationRequestConfig,
    agent: UserAgent,
    platform: PlatformProfile | None = None,
    builder: AuthorizationRequestBuilder | None = None,
    app_id: str | None = None,
) -> AuthRequestController:
    """Create an unloaded request controller for Google sign-in.

    Without an explicit `platform`, the host is detected and `app_id` sets
    the native redirect scheme. A config with no `redirect_uri` needs one of
    the two, otherwise `load()` raises RedirectUriError.

    Call `load()` on the result before prompting.
    """
    return AuthRequestController(
        config=config,
        platform=platform or PlatformProfile.detect(app_id=app_id),
        policy=GOOGLE_POLICY,
        agent=agent,
        builder=builder,
    )
