"""
Identity Provider Interface

Abstract contract for bearer-token verification. Concrete providers
(Firebase ID tokens, shared-secret JWTs) live in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..errors import UnauthorizedError


BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Identity:
    """An authenticated caller."""
    user_id: str
    email: Optional[str] = None


class IIdentityProvider(ABC):
    """Verifies bearer tokens and resolves them to an Identity."""

    @abstractmethod
    def verify(self, token: str) -> Identity:
        """
        Validate a bearer token.

        Args:
            token: Raw token without the 'Bearer ' prefix

        Returns:
            Identity the token was issued to

        Raises:
            UnauthorizedError: If the token is invalid or expired
        """
        pass  # pragma: no cover


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract the token from an Authorization header value.

    Returns:
        The token, or None when no header was sent

    Raises:
        UnauthorizedError: If a header was sent but is not 'Bearer <token>'
    """
    if authorization is None:
        return None
    if not authorization.startswith(BEARER_PREFIX):
        raise UnauthorizedError("Unauthorized: Malformed authorization header")
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise UnauthorizedError("Unauthorized: Malformed authorization header")
    return token
