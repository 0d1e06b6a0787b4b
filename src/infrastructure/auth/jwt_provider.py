"""JWT authentication provider implementation.

Accepts Supabase-issued session tokens (ES256, verified against the
project's JWKS) and locally-issued HS256 tokens.

Supabase JWT payload structure:
    {
        "sub": "user-uuid",
        "email": "student@campus.edu",
        "role": "authenticated",
        "aud": "authenticated",
        "user_metadata": { "full_name": "Ada", "avatar_url": "https://..." },
        "exp": 1234567890
    }
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

import httpx
from jose import JWTError, jwt
from jose.backends import ECKey

from core.config import settings
from infrastructure.auth.provider import TokenUser

logger = logging.getLogger(__name__)


class JWTAuthProvider:
    """JWT-based authentication provider.

    The JWKS key set is cached per provider instance and refetched once
    when a token names an unknown key id.
    """

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
        jwks_url: str = settings.supabase_jwks_url,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes
        self._jwks_url = jwks_url
        self._jwks_cache: dict[str, Any] | None = None

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT and extract the caller.

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid or expired
        """
        try:
            header = jwt.get_unverified_header(token)
            alg = header.get("alg", self._algorithm)

            if alg == "ES256":
                payload = await self._validate_es256(token, header)
            else:
                payload = jwt.decode(
                    token,
                    self._secret_key,
                    algorithms=[self._algorithm],
                    options={"verify_aud": False},
                )
        except JWTError:
            return None

        if payload is None:
            return None

        user_id = payload.get("sub")
        email = payload.get("email")
        if not user_id or not email:
            return None

        try:
            parsed_id = UUID(user_id)
        except ValueError:
            logger.warning("Token subject is not a UUID")
            return None

        user_metadata = payload.get("user_metadata") or {}
        full_name = (
            user_metadata.get("full_name")
            or user_metadata.get("name")
            or payload.get("name")
        )

        return TokenUser(
            id=parsed_id,
            email=email,
            full_name=full_name,
            avatar_url=user_metadata.get("avatar_url"),
            role=payload.get("role"),
        )

    async def _get_jwks_keys(self, refresh: bool = False) -> dict[str, Any]:
        """Fetch the kid -> key mapping, caching it on the instance."""
        if self._jwks_cache is not None and not refresh:
            return self._jwks_cache

        if not self._jwks_url:
            return {}

        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self._jwks_url, timeout=10.0)
                response.raise_for_status()
                jwks_data = response.json()
        except httpx.HTTPError:
            logger.exception("Failed to fetch JWKS from %s", self._jwks_url)
            return {}

        self._jwks_cache = {
            key_data["kid"]: key_data
            for key_data in jwks_data.get("keys", [])
            if key_data.get("kid")
        }
        logger.info("Fetched %d JWKS keys", len(self._jwks_cache))
        return self._jwks_cache

    async def _validate_es256(self, token: str, header: dict) -> Optional[dict]:
        """Validate an ES256-signed JWT using JWKS public keys."""
        kid = header.get("kid")
        if not kid:
            return None

        key_data = (await self._get_jwks_keys()).get(kid)
        if not key_data:
            # Key rotation
            key_data = (await self._get_jwks_keys(refresh=True)).get(kid)
            if not key_data:
                logger.warning("JWKS key not found for kid=%s", kid)
                return None

        ec_key = ECKey(key_data, algorithm="ES256")
        return jwt.decode(
            token,
            ec_key,
            algorithms=["ES256"],
            options={"verify_aud": False},
        )

    def create_token(self, user: TokenUser) -> str:
        """
        Create an HS256 session token for a user.

        Args:
            user: The user to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(user.id),
            "email": user.email,
            "aud": "authenticated",
            "role": user.role or "authenticated",
            "exp": expire,
            "user_metadata": {
                "full_name": user.full_name,
                "avatar_url": user.avatar_url,
            },
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
