"""Deterministic verifier for local runs and tests."""

from app.adapters.auth.base import AuthVerificationError, TokenVerifier, claimed_principal
from app.schemas.auth import AuthPrincipal

_MOCK_PREFIX = "test"


class MockTokenVerifier(TokenVerifier):
    """Accepts ``test:<user_id>`` and ``test:<user_id>:<role>`` without any signature."""

    def verify_token(self, token: str) -> AuthPrincipal:
        prefix, _, claims = token.partition(":")
        if prefix != _MOCK_PREFIX or not claims:
            raise AuthVerificationError("Invalid token")

        user_id, _, role = claims.partition(":")
        if ":" in role:
            raise AuthVerificationError("Invalid token")
        return claimed_principal(user_id, role or None)


__all__ = ["MockTokenVerifier"]
