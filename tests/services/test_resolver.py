"""Tests for parameter resolution.

Covers the provider policy rules applied before a request is built:
- Required scopes and de-duplication
- Client id slot selection and the missing client id failure
- PKCE and client secret policy per response type
- Provider hint mapping onto extra parameters
"""

import pytest

from authsession.models.config import (
    AuthorizationRequestConfig,
    Prompt,
    ResponseType,
)
from authsession.models.errors import MissingClientIdError
from authsession.models.platform import HostPlatform, PlatformProfile
from authsession.providers.google import GOOGLE_MINIMUM_SCOPES, GOOGLE_POLICY
from authsession.services.resolver import ParameterResolver


class TestScopeResolution:
    def setup_method(self):
        self.resolver = ParameterResolver(GOOGLE_POLICY)
        self.platform = PlatformProfile(
            host=HostPlatform.ANDROID, app_id="com.example.app"
        )

    @pytest.mark.parametrize(
        "scopes",
        [
            [],
            ["extra.scope"],
            ["openid", "extra.scope"],
            ["https://www.googleapis.com/auth/userinfo.email", "a", "a"],
        ],
    )
    def test_scopes_contain_minimum_without_duplicates(self, scopes):
        # Arrange
        config = AuthorizationRequestConfig(client_id="c1", scopes=scopes)

        # Act
        resolved = self.resolver.resolve(config, self.platform)

        # Assert
        assert set(GOOGLE_MINIMUM_SCOPES) <= set(resolved.scopes)
        assert set(scopes) <= set(resolved.scopes)
        assert len(resolved.scopes) == len(set(resolved.scopes))

    def test_scope_is_space_joined(self):
        config = AuthorizationRequestConfig(client_id="c1", scopes=["extra.scope"])

        resolved = self.resolver.resolve(config, self.platform)

        assert resolved.scope.split(" ") == list(resolved.scopes)

    def test_scope_with_whitespace_is_rejected(self):
        with pytest.raises(ValueError):
            AuthorizationRequestConfig(client_id="c1", scopes=["two words"])


class TestClientIdResolution:
    def setup_method(self):
        self.resolver = ParameterResolver(GOOGLE_POLICY)
        self.config = AuthorizationRequestConfig(
            client_id="generic",
            ios_client_id="ios",
            android_client_id="android",
            web_client_id="web",
            proxy_client_id="proxy",
            redirect_uri="https://app.example.com/callback",
        )

    @pytest.mark.parametrize(
        "host,use_proxy,expected",
        [
            (HostPlatform.IOS, False, "ios"),
            (HostPlatform.ANDROID, False, "android"),
            (HostPlatform.WEB, False, "web"),
            (HostPlatform.DESKTOP, False, "web"),
            (HostPlatform.ANDROID, True, "proxy"),
        ],
    )
    def test_platform_slot_selected(self, host, use_proxy, expected):
        # Arrange
        platform = PlatformProfile(host=host, use_proxy=use_proxy)

        # Act
        resolved = self.resolver.resolve(self.config, platform)

        # Assert
        assert resolved.client_id == expected

    def test_generic_client_id_used_when_slot_empty(self):
        config = AuthorizationRequestConfig(
            client_id="generic", ios_client_id="ios", redirect_uri="x:/cb"
        )
        platform = PlatformProfile(host=HostPlatform.ANDROID)

        resolved = self.resolver.resolve(config, platform)

        assert resolved.client_id == "generic"
        assert resolved.client_id_slot == "android_client_id"

    def test_empty_slot_does_not_fall_back_to_generic(self):
        config = AuthorizationRequestConfig(
            client_id="generic", android_client_id="", redirect_uri="x:/cb"
        )
        platform = PlatformProfile(host=HostPlatform.ANDROID)

        with pytest.raises(MissingClientIdError) as exc_info:
            self.resolver.resolve(config, platform)

        assert exc_info.value.slot == "android_client_id"

    def test_missing_client_id_names_the_slot(self):
        # Arrange
        config = AuthorizationRequestConfig(ios_client_id="ios", redirect_uri="x:/cb")
        platform = PlatformProfile(host=HostPlatform.ANDROID)

        # Act & Assert
        with pytest.raises(MissingClientIdError) as exc_info:
            self.resolver.resolve(config, platform)

        assert exc_info.value.slot == "android_client_id"
        assert "android_client_id" in str(exc_info.value)

    def test_missing_proxy_client_id(self):
        config = AuthorizationRequestConfig(android_client_id="android")
        platform = PlatformProfile(
            host=HostPlatform.ANDROID,
            use_proxy=True,
            proxy_redirect_uri="https://proxy.example.com/@me/app",
        )

        with pytest.raises(MissingClientIdError) as exc_info:
            self.resolver.resolve(config, platform)

        assert exc_info.value.slot == "proxy_client_id"


class TestResponseTypePolicy:
    def setup_method(self):
        self.resolver = ParameterResolver(GOOGLE_POLICY)
        self.platform = PlatformProfile(host=HostPlatform.WEB, web_origin="https://a.b")

    @pytest.mark.parametrize("response_type", [ResponseType.TOKEN, ResponseType.ID_TOKEN])
    def test_pkce_disabled_for_implicit_flows(self, response_type):
        config = AuthorizationRequestConfig(
            client_id="c1", response_type=response_type, use_pkce=True
        )

        resolved = self.resolver.resolve(config, self.platform)

        assert resolved.use_pkce is False

    def test_pkce_follows_caller_for_code_flow(self):
        enabled = AuthorizationRequestConfig(client_id="c1")
        disabled = AuthorizationRequestConfig(client_id="c1", use_pkce=False)

        assert self.resolver.resolve(enabled, self.platform).use_pkce is True
        assert self.resolver.resolve(disabled, self.platform).use_pkce is False

    def test_client_secret_dropped_for_code_flow(self):
        config = AuthorizationRequestConfig(
            client_id="c1", client_secret="s3cret", response_type=ResponseType.CODE
        )

        resolved = self.resolver.resolve(config, self.platform)

        assert resolved.client_secret is None

    @pytest.mark.parametrize("response_type", [ResponseType.TOKEN, ResponseType.ID_TOKEN])
    def test_client_secret_kept_for_implicit_flows(self, response_type):
        config = AuthorizationRequestConfig(
            client_id="c1", client_secret="s3cret", response_type=response_type
        )

        resolved = self.resolver.resolve(config, self.platform)

        assert resolved.client_secret == "s3cret"

    def test_client_secret_not_in_repr(self):
        config = AuthorizationRequestConfig(
            client_id="c1", client_secret="s3cret", response_type=ResponseType.TOKEN
        )

        resolved = self.resolver.resolve(config, self.platform)

        assert "s3cret" not in repr(resolved)


class TestExtraParams:
    def setup_method(self):
        self.resolver = ParameterResolver(GOOGLE_POLICY)

    def test_hints_map_to_provider_keys(self):
        # Arrange
        config = AuthorizationRequestConfig(
            client_id="c1",
            language="fr",
            login_hint="user@example.com",
            select_account=True,
        )

        # Act
        params = self.resolver.resolve_extra_params(config)

        # Assert
        assert params == {
            "hl": "fr",
            "login_hint": "user@example.com",
            "prompt": "select_account",
        }
        assert "language" not in params
        assert "loginHint" not in params

    def test_caller_extra_params_win(self):
        config = AuthorizationRequestConfig(
            client_id="c1",
            language="fr",
            select_account=True,
            extra_params={"hl": "de", "prompt": "consent", "access_type": "offline"},
        )

        params = self.resolver.resolve_extra_params(config)

        assert params == {"hl": "de", "prompt": "consent", "access_type": "offline"}

    def test_generic_prompt(self):
        config = AuthorizationRequestConfig(client_id="c1", prompt=Prompt.CONSENT)

        params = self.resolver.resolve_extra_params(config)

        assert params == {"prompt": "consent"}

    def test_select_account_takes_precedence_over_prompt(self):
        config = AuthorizationRequestConfig(
            client_id="c1", prompt=Prompt.LOGIN, select_account=True
        )

        params = self.resolver.resolve_extra_params(config)

        assert params["prompt"] == "select_account"

    def test_caller_mapping_not_mutated(self):
        extra = {"access_type": "offline"}
        config = AuthorizationRequestConfig(client_id="c1", language="fr", extra_params=extra)

        self.resolver.resolve_extra_params(config)

        assert config.extra_params == {"access_type": "offline"}


class TestResolvedIdentity:
    def test_identity_is_stable_and_input_sensitive(self):
        resolver = ParameterResolver(GOOGLE_POLICY)
        platform = PlatformProfile(host=HostPlatform.ANDROID, app_id="com.example.app")
        config = AuthorizationRequestConfig(client_id="c1", scopes=["a"])

        first = resolver.resolve(config, platform)
        second = resolver.resolve(config, platform)
        changed = resolver.resolve(config.model_copy(update={"scopes": ["b"]}), platform)

        assert first.identity == second.identity
        assert first.identity != changed.identity
