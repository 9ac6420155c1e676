"""
JWT Identity Provider

Verifies shared-secret JWTs such as the access tokens Supabase Auth issues
(HS256, user id in ``sub``).
"""

import logging
from typing import Optional

from jose import JWTError, jwt

from filedrop.domain.errors import UnauthorizedError
from filedrop.domain.identity import Identity, IIdentityProvider

logger = logging.getLogger(__name__)


class JwtIdentityProvider(IIdentityProvider):
    """IIdentityProvider backed by python-jose."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: Optional[str] = None,
    ):
        if not secret:
            raise ValueError("secret cannot be empty")
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience

    def verify(self, token: str) -> Identity:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                options={"verify_aud": self.audience is not None},
            )
        except JWTError as e:
            logger.info(f"Rejected JWT: {e}")
            raise UnauthorizedError("Unauthorized: Invalid authentication token", e) from e

        user_id = claims.get("sub")
        if not user_id:
            raise UnauthorizedError("Unauthorized: Invalid authentication token")
        return Identity(user_id=str(user_id), email=claims.get("email"))
