"""
Authentication Application Service

Turns an Authorization header into an Identity (or the anonymous caller)
before any storage call is made.
"""

import logging
from typing import Optional

from filedrop.domain.errors import ConfigurationError, UnauthorizedError
from filedrop.domain.identity import Identity, IIdentityProvider, extract_bearer_token

logger = logging.getLogger(__name__)


class AuthService:
    """
    Resolves callers for the file handlers.

    With require_auth False, callers without an Authorization header use the
    global namespace; a header that is sent is always verified.
    """

    def __init__(
        self,
        identity_provider: Optional[IIdentityProvider] = None,
        require_auth: bool = False,
    ):
        self.identity_provider = identity_provider
        self.require_auth = require_auth

    def resolve_identity(
        self, authorization: Optional[str], required: bool = False
    ) -> Optional[Identity]:
        """
        Resolve the caller behind an Authorization header.

        Args:
            authorization: Raw Authorization header value, None if absent
            required: Whether this handler always needs an identity

        Returns:
            Identity, or None for an anonymous caller

        Raises:
            UnauthorizedError: Missing token where one is required, malformed
                header, or token rejected by the provider
            ConfigurationError: Token sent but no identity provider configured
        """
        token = extract_bearer_token(authorization)

        if token is None:
            if required or self.require_auth:
                raise UnauthorizedError("Unauthorized: No authentication token provided")
            return None

        if self.identity_provider is None:
            raise ConfigurationError(
                "Identity provider not initialized. Check AUTH_PROVIDER environment variable."
            )

        identity = self.identity_provider.verify(token)
        logger.debug(f"Authenticated user {identity.user_id}")
        return identity
