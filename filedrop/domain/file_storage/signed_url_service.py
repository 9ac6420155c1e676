"""
Signed URL Service

Generates and validates time-limited HMAC-signed URLs for objects served by
the application itself (the local filesystem backend). Cloud backends sign
their own URLs.
"""

import hashlib
import hmac
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote, urlencode


def content_path() -> str:
    """Route of the content endpoint under the versioned API blueprint."""
    return f"/api/{os.getenv('API_VERSION', 'v1')}/files/content"


@dataclass
class SignedUrl:
    """A URL for one object key, valid until expires_at."""

    url: str
    key: str
    expires_at: datetime
    signature: str


class SignedUrlService:
    """
    Service for generating and validating signed URLs.

    The signature covers the object key and the expiry timestamp, so neither
    can be altered without invalidating the URL.
    """

    def __init__(
        self, secret_key: Optional[str] = None, base_url: Optional[str] = None
    ):
        """
        Initialize SignedUrlService.

        Args:
            secret_key: Secret key for HMAC signing (falls back to the SECRET_KEY
                env var, then to a random key valid for this process only)
            base_url: Public base URL of the service. Falls back to the
                DOWNLOAD_BASE_URL env var; without either, URLs are relative.
        """
        self.secret_key = (
            secret_key or os.getenv("SECRET_KEY") or self._generate_secret_key()
        )
        base = base_url if base_url is not None else os.getenv("DOWNLOAD_BASE_URL", "")
        self.base_url = base.rstrip("/") + content_path()

    @staticmethod
    def _generate_secret_key(length: int = 32) -> str:
        """Generate a cryptographically secure secret key."""
        return secrets.token_hex(length)

    def generate_signed_url(
        self,
        key: str,
        ttl: timedelta = timedelta(hours=1),
        now: Optional[datetime] = None,
    ) -> SignedUrl:
        """
        Generate a signed URL for an object key.

        Args:
            key: Object key to grant access to
            ttl: How long the URL stays valid
            now: Reference time (default: current UTC time)

        Returns:
            SignedUrl object with URL and expiration information
        """
        now = now or datetime.now(timezone.utc)
        expires_at = now + ttl
        expires = int(expires_at.timestamp())
        signature = self._generate_signature(key, expires)

        query = urlencode({"expires": expires, "signature": signature})
        url = f"{self.base_url}/{quote(key)}?{query}"

        return SignedUrl(url=url, key=key, expires_at=expires_at, signature=signature)

    def _generate_signature(self, key: str, expires: int) -> str:
        """
        Generate HMAC-SHA256 signature for a key and expiry (epoch seconds).
        """
        message = f"{key}:{expires}"
        return hmac.new(
            self.secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    def validate(
        self,
        key: str,
        signature: Optional[str],
        expires: Optional[str],
        now: Optional[datetime] = None,
    ) -> bool:
        """
        Validate a signature and its expiry.

        Args:
            key: Object key from the URL path
            signature: HMAC signature from the query string
            expires: Expiry epoch seconds from the query string
            now: Reference time (default: current UTC time)

        Returns:
            True if the signature matches and has not expired
        """
        if not signature or not expires:
            return False
        try:
            expires_value = int(expires)
        except (TypeError, ValueError):
            return False

        expected = self._generate_signature(key, expires_value)
        # Constant-time comparison
        if not hmac.compare_digest(signature, expected):
            return False

        now = now or datetime.now(timezone.utc)
        return now.timestamp() < expires_value
