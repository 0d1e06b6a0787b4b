"""Unit tests for JWTAuthProvider ES256/JWKS paths.

Covers:
- _get_jwks_keys() fetching, per-instance caching, refresh and error handling
- _validate_es256() with a mocked key set
- validate_token returning None when payload lacks sub or email
- profile claims read from user_metadata
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import httpx
import pytest
from jose import jwt as jose_jwt

from infrastructure.auth import jwt_provider as jwt_provider_module
from infrastructure.auth.jwt_provider import JWTAuthProvider

JWKS_URL = "https://example.supabase.co/auth/v1/.well-known/jwks.json"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_hs256_token(payload: dict, secret: str = "test-secret") -> str:
    """Create an HS256-signed JWT with a given payload."""
    return jose_jwt.encode(payload, secret, algorithm="HS256")


def _mock_http_client(jwks: dict | None = None, error: Exception | None = None) -> AsyncMock:
    """An httpx.AsyncClient stand-in returning ``jwks`` or raising ``error``."""
    client = AsyncMock()
    if error is not None:
        client.get.side_effect = error
    else:
        response = MagicMock()
        response.json.return_value = jwks
        response.raise_for_status = MagicMock()
        client.get.return_value = response
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def hs256_provider() -> JWTAuthProvider:
    """JWTAuthProvider configured for HS256 (local/test tokens)."""
    return JWTAuthProvider(
        secret_key="test-secret", algorithm="HS256", expire_minutes=30, jwks_url=""
    )


@pytest.fixture
def jwks_provider() -> JWTAuthProvider:
    """JWTAuthProvider with a JWKS endpoint configured."""
    return JWTAuthProvider(
        secret_key="unused", algorithm="HS256", expire_minutes=30, jwks_url=JWKS_URL
    )


# ---------------------------------------------------------------------------
# Tests: validate_token claims
# ---------------------------------------------------------------------------


class TestValidateTokenClaims:
    """validate_token should return None when the decoded payload is missing
    the required 'sub' or 'email' claims."""

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "user@campus.edu"},
            {"sub": str(uuid4())},
            {"sub": "", "email": "user@campus.edu"},
            {"sub": str(uuid4()), "email": ""},
            {"sub": "not-a-uuid", "email": "user@campus.edu"},
        ],
    )
    async def test_should_return_none_for_incomplete_claims(
        self, hs256_provider: JWTAuthProvider, payload: dict
    ):
        token = _make_hs256_token({**payload, "exp": 9999999999})

        result = await hs256_provider.validate_token(token)

        assert result is None

    async def test_should_fall_back_to_name_claim(self, hs256_provider: JWTAuthProvider):
        """OAuth sign-ins put the display name under user_metadata.name."""
        token = _make_hs256_token(
            {
                "sub": str(uuid4()),
                "email": "grace@campus.edu",
                "user_metadata": {"name": "Grace Hopper"},
                "exp": 9999999999,
            }
        )

        result = await hs256_provider.validate_token(token)

        assert result is not None
        assert result.full_name == "Grace Hopper"
        assert result.avatar_url is None


# ---------------------------------------------------------------------------
# Tests: _get_jwks_keys
# ---------------------------------------------------------------------------


class TestGetJwksKeys:
    """Tests for the per-instance JWKS cache."""

    async def test_should_return_empty_dict_when_no_jwks_url(
        self, hs256_provider: JWTAuthProvider
    ):
        with patch.object(jwt_provider_module.httpx, "AsyncClient") as mock_client_cls:
            result = await hs256_provider._get_jwks_keys()

        assert result == {}
        mock_client_cls.assert_not_called()

    async def test_should_fetch_and_cache_jwks_keys(self, jwks_provider: JWTAuthProvider):
        """Keys are fetched once, cached, and returned as a kid -> key mapping."""
        client = _mock_http_client(
            {
                "keys": [
                    {"kid": "key-1", "kty": "EC", "crv": "P-256", "x": "aa", "y": "bb"},
                    {"kid": "key-2", "kty": "EC", "crv": "P-256", "x": "cc", "y": "dd"},
                ]
            }
        )

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            result = await jwks_provider._get_jwks_keys()

            assert set(result) == {"key-1", "key-2"}
            assert result["key-1"]["kty"] == "EC"

            client.get.reset_mock()
            cached_result = await jwks_provider._get_jwks_keys()
            client.get.assert_not_called()
            assert cached_result == result

    async def test_refresh_bypasses_cache(self, jwks_provider: JWTAuthProvider):
        client = _mock_http_client({"keys": [{"kid": "key-1", "kty": "EC"}]})

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            await jwks_provider._get_jwks_keys()
            await jwks_provider._get_jwks_keys(refresh=True)

        assert client.get.await_count == 2

    async def test_cache_is_per_instance(self, jwks_provider: JWTAuthProvider):
        client = _mock_http_client({"keys": [{"kid": "key-1", "kty": "EC"}]})
        other = JWTAuthProvider(
            secret_key="unused", algorithm="HS256", expire_minutes=30, jwks_url=JWKS_URL
        )

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            await jwks_provider._get_jwks_keys()
            await other._get_jwks_keys()

        assert client.get.await_count == 2

    async def test_should_return_empty_dict_on_http_error(self, jwks_provider: JWTAuthProvider):
        client = _mock_http_client(error=httpx.ConnectError("Connection refused"))

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            result = await jwks_provider._get_jwks_keys()

        assert result == {}
        assert jwks_provider._jwks_cache is None

    async def test_should_skip_keys_without_kid(self, jwks_provider: JWTAuthProvider):
        client = _mock_http_client(
            {
                "keys": [
                    {"kty": "EC", "crv": "P-256", "x": "aa", "y": "bb"},  # no kid
                    {"kid": "good-key", "kty": "EC", "crv": "P-256", "x": "cc", "y": "dd"},
                ]
            }
        )

        with patch.object(jwt_provider_module.httpx, "AsyncClient", return_value=client):
            result = await jwks_provider._get_jwks_keys()

        assert list(result) == ["good-key"]


# ---------------------------------------------------------------------------
# Tests: _validate_es256
# ---------------------------------------------------------------------------


class TestValidateEs256:
    """Tests for the ES256 validation path inside JWTAuthProvider."""

    async def test_should_return_none_when_header_has_no_kid(
        self, jwks_provider: JWTAuthProvider
    ):
        result = await jwks_provider._validate_es256(
            token="dummy.token.value",
            header={"alg": "ES256"},  # no kid
        )

        assert result is None

    async def test_should_return_none_when_kid_not_found_in_jwks(
        self, jwks_provider: JWTAuthProvider
    ):
        with patch.object(
            jwks_provider, "_get_jwks_keys", new_callable=AsyncMock
        ) as mock_get_jwks:
            mock_get_jwks.return_value = {"other-kid": {"kty": "EC"}}

            result = await jwks_provider._validate_es256(
                token="dummy.token.value",
                header={"alg": "ES256", "kid": "missing-kid"},
            )

        assert result is None
        # Initial lookup, then one refresh for key rotation
        assert mock_get_jwks.await_args_list[0].kwargs == {}
        assert mock_get_jwks.await_args_list[1].kwargs == {"refresh": True}

    async def test_should_decode_token_when_kid_found_in_jwks(
        self, jwks_provider: JWTAuthProvider
    ):
        fake_key_data = {"kid": "test-kid", "kty": "EC", "crv": "P-256"}
        fake_payload = {"sub": str(uuid4()), "email": "test@campus.edu", "exp": 9999999999}

        with (
            patch.object(
                jwks_provider, "_get_jwks_keys", new_callable=AsyncMock
            ) as mock_get_jwks,
            patch.object(jwt_provider_module, "ECKey") as mock_eckey_cls,
            patch.object(jwt_provider_module, "jwt") as mock_jwt,
        ):
            mock_get_jwks.return_value = {"test-kid": fake_key_data}
            mock_ec_instance = MagicMock()
            mock_eckey_cls.return_value = mock_ec_instance
            mock_jwt.decode.return_value = fake_payload

            result = await jwks_provider._validate_es256(
                token="es256.token.value",
                header={"alg": "ES256", "kid": "test-kid"},
            )

            assert result == fake_payload
            mock_get_jwks.assert_awaited_once_with()
            mock_eckey_cls.assert_called_once_with(fake_key_data, algorithm="ES256")
            mock_jwt.decode.assert_called_once_with(
                "es256.token.value",
                mock_ec_instance,
                algorithms=["ES256"],
                options={"verify_aud": False},
            )

    async def test_should_refetch_jwks_and_succeed_on_key_rotation(
        self, jwks_provider: JWTAuthProvider
    ):
        """First lookup misses the kid, the refreshed key set has it."""
        fake_key_data = {"kid": "rotated-kid", "kty": "EC", "crv": "P-256"}
        fake_payload = {"sub": str(uuid4()), "email": "rotated@campus.edu"}

        async def get_keys(refresh: bool = False) -> dict:
            return {"rotated-kid": fake_key_data} if refresh else {}

        with (
            patch.object(jwks_provider, "_get_jwks_keys", side_effect=get_keys),
            patch.object(jwt_provider_module, "ECKey"),
            patch.object(jwt_provider_module, "jwt") as mock_jwt,
        ):
            mock_jwt.decode.return_value = fake_payload

            result = await jwks_provider._validate_es256(
                token="rotated.token.value",
                header={"alg": "ES256", "kid": "rotated-kid"},
            )

        assert result == fake_payload


# ---------------------------------------------------------------------------
# Tests: validate_token ES256 integration (mocked end-to-end)
# ---------------------------------------------------------------------------


class TestValidateTokenEs256Path:
    """validate_token delegates to _validate_es256 when the token header
    declares alg=ES256."""

    async def test_should_delegate_to_validate_es256_for_es256_token(
        self, hs256_provider: JWTAuthProvider
    ):
        user_id = str(uuid4())
        fake_payload = {
            "sub": user_id,
            "email": "es256user@campus.edu",
            "user_metadata": {"full_name": "ES256 User", "avatar_url": "https://cdn/a.png"},
            "role": "authenticated",
        }

        with patch.object(jwt_provider_module, "jwt") as mock_jwt:
            mock_jwt.get_unverified_header.return_value = {"alg": "ES256", "kid": "k1"}

            with patch.object(
                hs256_provider, "_validate_es256", new_callable=AsyncMock
            ) as mock_es256:
                mock_es256.return_value = fake_payload

                result = await hs256_provider.validate_token("es256.token.here")

                mock_es256.assert_called_once_with(
                    "es256.token.here",
                    {"alg": "ES256", "kid": "k1"},
                )
                assert result is not None
                assert result.email == "es256user@campus.edu"
                assert result.full_name == "ES256 User"
                assert result.avatar_url == "https://cdn/a.png"
                assert result.role == "authenticated"
                assert str(result.id) == user_id

    async def test_should_return_none_when_es256_validation_returns_none(
        self, hs256_provider: JWTAuthProvider
    ):
        with patch.object(jwt_provider_module, "jwt") as mock_jwt:
            mock_jwt.get_unverified_header.return_value = {"alg": "ES256", "kid": "k1"}

            with patch.object(
                hs256_provider, "_validate_es256", new_callable=AsyncMock
            ) as mock_es256:
                mock_es256.return_value = None

                result = await hs256_provider.validate_token("es256.token.here")

                assert result is None
