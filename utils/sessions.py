"""
Session lifecycle on top of the token codec and the refresh-token ledger.

- start_session: issue an access/refresh pair and record the refresh token
- refresh_session: exchange a recorded, still-valid refresh token for a new access token
- end_session: drop the refresh token from the ledger (idempotent)

The ledger is the authority on refresh-token validity: a token with a good
signature but no ledger row is rejected.
"""
from __future__ import annotations

import logging
from typing import Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models import storage
from models.refresh_token import RefreshToken
from models.user import User
from blog_api.errors import InternalError, PermissionDenied
from utils.security import (
    TokenExpired,
    TokenInvalid,
    get_token_codec,
    token_fingerprint,
    verify_password,
)

logger = logging.getLogger(__name__)

REFRESH_COOKIE = "refreshToken"

INVALID_CREDENTIALS = "User email or password is invalid."
REFRESH_NOT_FOUND = "This refresh token is invalid or has already been used."
REFRESH_EXPIRED = "Your refresh token has expired. Please log in again."
REFRESH_INVALID = "The refresh token provided is invalid."


def authenticate_credentials(email: str, password: str) -> User:
    """
    Resolve a user by email and password. Unknown email and wrong password
    raise the same PermissionDenied so callers cannot probe for accounts.
    """
    session = storage.get_session()
    user = session.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.password_hash):
        raise PermissionDenied(INVALID_CREDENTIALS)
    return user


def start_session(user: User) -> Tuple[str, str]:
    """Issue a token pair and persist the refresh token. Returns (access, refresh)."""
    codec = get_token_codec()
    access_token = codec.issue_access_token(user.id)
    refresh_token = codec.issue_refresh_token(user.id)

    try:
        RefreshToken.insert(refresh_token, user.id)
        storage.save()
    except SQLAlchemyError as exc:
        logger.error("Could not record refresh token for user %s (token %s)", user.id, token_fingerprint(refresh_token))
        raise InternalError("Something went wrong while starting the session.") from exc

    logger.info("Refresh token created for user %s (token %s)", user.id, token_fingerprint(refresh_token))
    return access_token, refresh_token


def refresh_session(refresh_token: str) -> Tuple[str, str]:
    """
    Exchange a refresh token for a new access token. Returns (access, refresh);
    refresh is the same token unless REFRESH_TOKEN_ROTATION is on.
    """
    codec = get_token_codec()

    try:
        recorded = RefreshToken.exists(refresh_token)
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while refreshing the access token.") from exc
    if not recorded:
        raise PermissionDenied(REFRESH_NOT_FOUND)

    # Expired rows stay in the ledger; only logout or rotation removes them
    try:
        claims = codec.verify_refresh_token(refresh_token)
    except TokenExpired:
        raise PermissionDenied(REFRESH_EXPIRED)
    except TokenInvalid:
        raise PermissionDenied(REFRESH_INVALID)

    user_id = claims["userId"]
    access_token = codec.issue_access_token(user_id)

    if not current_app.config.get("REFRESH_TOKEN_ROTATION"):
        return access_token, refresh_token

    new_refresh_token = codec.issue_refresh_token(user_id)
    try:
        if RefreshToken.delete_by_token(refresh_token) == 0:
            # A concurrent request rotated or revoked it first
            storage.rollback()
            raise PermissionDenied(REFRESH_NOT_FOUND)
        RefreshToken.insert(new_refresh_token, user_id)
        storage.save()
    except SQLAlchemyError as exc:
        logger.error("Could not rotate refresh token for user %s (token %s)", user_id, token_fingerprint(refresh_token))
        raise InternalError("Something went wrong while refreshing the access token.") from exc

    logger.info(
        "Refresh token rotated for user %s (token %s -> %s)",
        user_id, token_fingerprint(refresh_token), token_fingerprint(new_refresh_token),
    )
    return access_token, new_refresh_token


def end_session(refresh_token: str | None, user_id: str | None = None) -> None:
    """Revoke a refresh token. A missing or unknown token is not an error."""
    if not refresh_token:
        return
    try:
        deleted = RefreshToken.delete_by_token(refresh_token)
        storage.save()
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while logging out.") from exc

    if deleted:
        logger.info("Refresh token deleted for user %s (token %s)", user_id, token_fingerprint(refresh_token))
