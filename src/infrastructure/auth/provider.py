"""Authentication provider protocol."""

from dataclasses import dataclass
from typing import Optional, Protocol
from uuid import UUID


@dataclass
class TokenUser:
    """The caller resolved from a session token."""

    id: UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Optional[str] = None


class IAuthProvider(Protocol):
    """Protocol for authentication providers."""

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Resolve a session token to its user.

        Args:
            token: The bearer token to validate

        Returns:
            TokenUser if valid, None if invalid or expired
        """
        ...

    def create_token(self, user: TokenUser) -> str:
        """Issue a token for a user (local development and tests)."""
        ...
