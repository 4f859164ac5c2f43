import itertools
from unittest.mock import AsyncMock

import pytest

from authsession.models.config import AuthorizationRequestConfig, ResponseType
from authsession.models.platform import HostPlatform, PlatformProfile
from authsession.primitives.pkce import generate_pkce_pair
from authsession.providers.google import GOOGLE_POLICY
from authsession.services.builder import AuthorizationRequestBuilder
from authsession.services.replay import ReplayProtectionManager


@pytest.fixture
def android_platform() -> PlatformProfile:
    return PlatformProfile(host=HostPlatform.ANDROID, app_id="com.example.app")


@pytest.fixture
def hex_generator() -> AsyncMock:
    """Secure-random stand-in returning distinct hex strings of the right length."""
    counter = itertools.count(1)

    def generate(byte_length: int) -> str:
        return format(next(counter), "x").rjust(byte_length * 2, "0")

    return AsyncMock(side_effect=generate)


@pytest.fixture
def pkce_generator() -> AsyncMock:
    return AsyncMock(side_effect=generate_pkce_pair)


@pytest.fixture
def replay(hex_generator, pkce_generator) -> ReplayProtectionManager:
    return ReplayProtectionManager(
        hex_generator=hex_generator, pkce_generator=pkce_generator
    )


@pytest.fixture
def builder(replay) -> AuthorizationRequestBuilder:
    return AuthorizationRequestBuilder(replay)


@pytest.fixture
def policy():
    return GOOGLE_POLICY


@pytest.fixture
def code_config() -> AuthorizationRequestConfig:
    return AuthorizationRequestConfig(
        android_client_id="android-client",
        scopes=["https://www.googleapis.com/auth/drive.readonly"],
    )


@pytest.fixture
def id_token_config() -> AuthorizationRequestConfig:
    return AuthorizationRequestConfig(
        android_client_id="c1",
        response_type=ResponseType.ID_TOKEN,
        scopes=["extra.scope"],
    )
