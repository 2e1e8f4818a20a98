"""HS256 JWT bearer token verifier adapter."""

from __future__ import annotations

import jwt

from app.adapters.auth.base import AuthVerificationError, TokenVerifier, claimed_principal
from app.schemas.auth import AuthPrincipal


class JwtTokenVerifier(TokenVerifier):
    """Verifies signed JWTs carrying ``userId`` (or ``sub``) and ``role`` claims."""

    def __init__(self, secret: str | None, algorithm: str = "HS256") -> None:
        self._secret = secret
        self._algorithm = algorithm

    def verify_token(self, token: str) -> AuthPrincipal:
        if not self._secret:
            raise AuthVerificationError("Token verification is not configured")

        try:
            decoded = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthVerificationError("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthVerificationError("Invalid token") from exc

        return claimed_principal(decoded.get("userId") or decoded.get("sub"), decoded.get("role"))


__all__ = ["JwtTokenVerifier"]
