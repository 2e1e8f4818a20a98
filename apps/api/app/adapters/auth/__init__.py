"""Auth verifier adapters."""

from .base import AuthVerificationError, TokenVerifier, claimed_principal
from .jwt_auth import JwtTokenVerifier
from .mock_auth import MockTokenVerifier

__all__ = [
    "AuthVerificationError",
    "TokenVerifier",
    "claimed_principal",
    "JwtTokenVerifier",
    "MockTokenVerifier",
]
