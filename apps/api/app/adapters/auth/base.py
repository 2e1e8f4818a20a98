"""Bearer token verification contract shared by the auth adapters."""

from abc import ABC, abstractmethod

from app.schemas.auth import AuthPrincipal, Role


class AuthVerificationError(Exception):
    """Raised when a bearer token is malformed, expired or badly signed."""


def claimed_principal(user_id: object, role: object | None) -> AuthPrincipal:
    """Build a principal from raw token claims; a missing role claim means student."""
    normalized_id = str(user_id or "").strip()
    if not normalized_id:
        raise AuthVerificationError("Invalid token")
    try:
        claimed_role = Role(str(role).strip()) if role else Role.STUDENT
    except ValueError as exc:
        raise AuthVerificationError("Invalid token") from exc
    return AuthPrincipal(user_id=normalized_id, role=claimed_role)


class TokenVerifier(ABC):
    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Return the principal a token claims to be.

        The role is only a claim; callers load the stored account before deciding access.
        """


__all__ = ["AuthVerificationError", "TokenVerifier", "claimed_principal"]
