"""
Firebase Identity Provider

Verifies Firebase Authentication ID tokens with google-auth against
Google's published signing certificates.
"""

import logging
from typing import Optional

import google.auth.transport.requests
from google.auth import exceptions as google_auth_exceptions
from google.oauth2 import id_token

from filedrop.domain.errors import DomainError, UnauthorizedError
from filedrop.domain.identity import Identity, IIdentityProvider

logger = logging.getLogger(__name__)


class FirebaseIdentityProvider(IIdentityProvider):
    """
    IIdentityProvider backed by Firebase ID tokens.

    Attributes:
        project_id: Firebase project the tokens must be issued for
    """

    def __init__(self, project_id: str, request=None):
        """
        Args:
            project_id: Firebase project id, used as the expected audience
            request: google-auth transport request (default: requests-based)
        """
        if not project_id:
            raise ValueError("project_id cannot be empty")
        self.project_id = project_id
        self._request = request or google.auth.transport.requests.Request()

    def verify(self, token: str) -> Identity:
        try:
            claims = id_token.verify_firebase_token(
                token, self._request, audience=self.project_id
            )
        except google_auth_exceptions.TransportError as e:
            logger.error(f"Could not fetch Firebase signing certificates: {e}")
            raise DomainError(f"Token verification unavailable: {e}", e) from e
        except (ValueError, google_auth_exceptions.GoogleAuthError) as e:
            logger.info(f"Rejected Firebase token: {e}")
            raise UnauthorizedError("Unauthorized: Invalid authentication token", e) from e

        user_id: Optional[str] = (claims or {}).get("user_id") or (claims or {}).get("sub")
        if not user_id:
            raise UnauthorizedError("Unauthorized: Invalid authentication token")
        return Identity(user_id=user_id, email=claims.get("email"))
