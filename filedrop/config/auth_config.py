"""
Authentication Configuration

Reads identity provider settings from the environment.
"""

import os

PROVIDER_FIREBASE = "firebase"
PROVIDER_JWT = "jwt"


class AuthConfig:
    """Identity provider configuration settings."""

    def __init__(self):
        self.provider = (os.getenv("AUTH_PROVIDER") or "").lower()
        self.require_auth = os.getenv("REQUIRE_AUTH", "false").lower() == "true"

        # Firebase Authentication
        self.firebase_project_id = os.getenv("FIREBASE_PROJECT_ID")

        # Shared-secret JWTs (e.g. Supabase Auth)
        self.jwt_secret = os.getenv("JWT_SECRET")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.jwt_audience = os.getenv("JWT_AUDIENCE") or None
