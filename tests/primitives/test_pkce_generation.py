import base64
import hashlib

import pytest

from authsession.models.errors import PKCEError
from authsession.models.security import PKCEParameters
from authsession.primitives.pkce import PKCEManager, generate_pkce_pair
from authsession.primitives.random import generate_hex_string


class TestPKCEManager:
    def test_generate_parameters_crypto_requirements(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        params = pkce_manager.generate_parameters()

        # Assert RFC 7636 requirements
        assert 43 <= len(params.code_verifier) <= 128
        assert 43 <= len(params.code_challenge) <= 128
        assert params.code_challenge_method == "S256"

        # Verify code_challenge is base64url(sha256(code_verifier))
        expected_challenge = (
            base64.urlsafe_b64encode(
                hashlib.sha256(params.code_verifier.encode("ascii")).digest()
            )
            .decode("ascii")
            .rstrip("=")
        )
        assert params.code_challenge == expected_challenge

    def test_generate_parameters_uniqueness(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act - Generate multiple parameters
        params1 = pkce_manager.generate_parameters()
        params2 = pkce_manager.generate_parameters()

        # Assert - Each generation is unique
        assert params1.code_verifier != params2.code_verifier
        assert params1.code_challenge != params2.code_challenge

    def test_generation_failure_is_wrapped(self, monkeypatch) -> None:
        pkce_manager = PKCEManager()
        monkeypatch.setattr(pkce_manager, "_generate_code_verifier", lambda: "short")

        with pytest.raises(PKCEError):
            pkce_manager.generate_parameters()

    def test_verifier_hidden_from_repr(self) -> None:
        params = PKCEManager().generate_parameters()

        assert params.code_verifier not in repr(params)

    async def test_async_pair(self) -> None:
        params = await generate_pkce_pair()

        assert isinstance(params, PKCEParameters)


class TestPKCEParametersValidation:
    def test_rejects_plain_method(self) -> None:
        with pytest.raises(ValueError):
            PKCEParameters(code_verifier="a" * 43, code_challenge="b" * 43, code_challenge_method="plain")

    def test_rejects_short_verifier(self) -> None:
        with pytest.raises(ValueError):
            PKCEParameters(code_verifier="a" * 42, code_challenge="b" * 43)


class TestHexString:
    async def test_length_is_twice_byte_length(self) -> None:
        value = await generate_hex_string(16)

        assert len(value) == 32
        int(value, 16)

    async def test_values_are_unique(self) -> None:
        values = {await generate_hex_string(16) for _ in range(20)}

        assert len(values) == 20

    async def test_rejects_non_positive_length(self) -> None:
        with pytest.raises(ValueError):
            await generate_hex_string(0)
