"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access / refresh JWT issuance and verification via PyJWT
- Token fingerprints for logs
"""
from __future__ import annotations

import hashlib
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError

from flask import current_app

ph = PasswordHasher()

ACCESS_SUBJECT = "accessApi"
REFRESH_SUBJECT = "refreshToken"


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def token_fingerprint(token: str | None) -> str | None:
    """Short, non-reversible identifier of a token, safe to log."""
    if not token:
        return None
    return hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    """
    Signs and verifies the two token families. Access and refresh tokens use
    distinct secrets and lifetimes, so neither secret can forge the other kind.
    Never touches storage.
    """

    def __init__(self, access_secret: str, refresh_secret: str,
                 access_ttl: timedelta, refresh_ttl: timedelta, algorithm: str = "HS256"):
        if access_secret == refresh_secret:
            raise ValueError("access and refresh secrets must differ")
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm

    @classmethod
    def from_config(cls, config) -> "TokenCodec":
        return cls(
            access_secret=config["JWT_ACCESS_SECRET"],
            refresh_secret=config["JWT_REFRESH_SECRET"],
            access_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )

    def _issue(self, user_id: str, secret: str, ttl: timedelta, subject: str) -> str:
        now = _now()
        payload = {
            "userId": str(user_id),
            "sub": subject,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            "jti": generate_jti(),
        }
        return jwt.encode(payload, secret, algorithm=self.algorithm)

    def _verify(self, token: str, secret: str, subject: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenInvalid(f"Invalid token: {exc}") from exc

        if claims.get("sub") != subject or not claims.get("userId"):
            raise TokenInvalid("Wrong token type")
        return claims

    def issue_access_token(self, user_id: str) -> str:
        return self._issue(user_id, self.access_secret, self.access_ttl, ACCESS_SUBJECT)

    def issue_refresh_token(self, user_id: str) -> str:
        return self._issue(user_id, self.refresh_secret, self.refresh_ttl, REFRESH_SUBJECT)

    def verify_access_token(self, token: str) -> Dict[str, Any]:
        """Raises TokenExpired or TokenInvalid; returns the claims otherwise."""
        return self._verify(token, self.access_secret, ACCESS_SUBJECT)

    def verify_refresh_token(self, token: str) -> Dict[str, Any]:
        """Raises TokenExpired or TokenInvalid; returns the claims otherwise."""
        return self._verify(token, self.refresh_secret, REFRESH_SUBJECT)


def get_token_codec() -> TokenCodec:
    """Codec bound to the current app by create_app()."""
    return current_app.extensions["token_codec"]
