"""
Identity Provider Factory

Creates the identity provider selected by AUTH_PROVIDER, or none.
"""

import logging
from typing import Optional

from filedrop.config.auth_config import PROVIDER_FIREBASE, PROVIDER_JWT, AuthConfig
from filedrop.domain.errors import ConfigurationError
from filedrop.domain.identity import IIdentityProvider

logger = logging.getLogger(__name__)


class IdentityProviderFactory:
    """Factory for IIdentityProvider implementations."""

    @staticmethod
    def create_provider(config: Optional[AuthConfig] = None) -> Optional[IIdentityProvider]:
        """
        Create the configured identity provider.

        Returns:
            IIdentityProvider, or None when AUTH_PROVIDER is unset

        Raises:
            ConfigurationError: If the provider is unknown or its settings are incomplete
        """
        config = config or AuthConfig()

        if not config.provider:
            logger.info("Identity provider: none configured, anonymous access only")
            return None

        if config.provider == PROVIDER_FIREBASE:
            if not config.firebase_project_id:
                raise ConfigurationError("FIREBASE_PROJECT_ID is required for the firebase provider")
            from filedrop.infrastructure.firebase_identity_provider import (
                FirebaseIdentityProvider,
            )

            logger.info(f"Identity provider: Firebase project {config.firebase_project_id}")
            return FirebaseIdentityProvider(config.firebase_project_id)

        if config.provider == PROVIDER_JWT:
            if not config.jwt_secret:
                raise ConfigurationError("JWT_SECRET is required for the jwt provider")
            from filedrop.infrastructure.jwt_identity_provider import JwtIdentityProvider

            logger.info(f"Identity provider: JWT ({config.jwt_algorithm})")
            return JwtIdentityProvider(
                config.jwt_secret,
                algorithm=config.jwt_algorithm,
                audience=config.jwt_audience,
            )

        raise ConfigurationError(f"Unsupported AUTH_PROVIDER: {config.provider}")
