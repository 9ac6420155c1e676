"""
Identity Domain

Bearer-token parsing and the identity provider contract.
"""

from .identity_provider import Identity, IIdentityProvider, extract_bearer_token

__all__ = [
    "Identity",
    "IIdentityProvider",
    "extract_bearer_token",
]
