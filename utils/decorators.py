from __future__ import annotations

import logging
from functools import wraps

from flask import request, g
from sqlalchemy.exc import SQLAlchemyError

from models import storage
from models.user import User
from blog_api.errors import InternalError, NotFound, PermissionDenied
from blog_api.response import STATUS
from utils.security import TokenExpired, TokenInvalid, get_token_codec

logger = logging.getLogger(__name__)


def jwt_required():
    """
    Require `Authorization: Bearer <access token>`. On success the token's
    user id is available as g.user_id. No store lookup happens here.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                raise PermissionDenied("We couldn't find a valid access token. Please sign in and try again.")
            token = auth.split(" ", 1)[1].strip()
            try:
                claims = get_token_codec().verify_access_token(token)
            except TokenExpired:
                raise PermissionDenied(
                    "Your access token has expired. Please use your refresh token to get a new one."
                )
            except TokenInvalid:
                raise PermissionDenied("The access token provided is invalid.")
            except Exception as exc:
                logger.exception("Error during authentication")
                raise InternalError("We ran into a problem while verifying your access token.") from exc

            g.user_id = claims["userId"]
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[str]):
    """
    Authenticate, then allow access only if the user's current role is one
    of required_roles. The role is read from the store on every request, so
    a role change applies immediately.
    """
    req = set(required_roles or [])

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            try:
                row = storage.get_session().query(User.role).filter(User.id == g.user_id).first()
            except SQLAlchemyError as exc:
                logger.error("Error while authorizing user %s", g.user_id)
                raise InternalError("We ran into an issue while authorizing this request.") from exc

            if row is None:
                raise NotFound("We could not find that user.")

            role = getattr(row.role, "value", row.role)
            if role not in req:
                raise PermissionDenied(status=STATUS.FORBIDDEN)

            g.user_role = role
            return fn(*args, **kwargs)

        return wrapper

    return decorator
