"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens and longer-lived refresh tokens (JWTs signed with distinct secrets)
- Stores refresh tokens in DB (RefreshToken model) so they can be revoked
- Returns the access token in the body; the refresh token travels only in an HttpOnly cookie
"""
from __future__ import annotations

import logging
import re

from flask import Blueprint, request, g, current_app, make_response
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import storage
from models.user import User, Role
from models.schemas.user import UserRegisterSchema, UserLoginSchema, UserSummarySchema
from utils.decorators import jwt_required
from utils.generators import gen_username
from utils.security import hash_password
from utils.sessions import (
    REFRESH_COOKIE,
    authenticate_credentials,
    start_session,
    refresh_session,
    end_session,
)

from .errors import InternalError, PermissionDenied, ValidationFailed
from .response import STATUS, response

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
user_summary_schema = UserSummarySchema()

JWT_SHAPE = re.compile(r"^[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*$")


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": bool(current_app.config.get("REFRESH_COOKIE_SECURE")),
        "samesite": "Strict",
        "path": "/",
    }


def set_refresh_cookie(resp, token: str):
    resp.set_cookie(REFRESH_COOKIE, token, **_cookie_options())
    return resp


def clear_refresh_cookie(resp):
    resp.delete_cookie(REFRESH_COOKIE, **_cookie_options())
    return resp


def _session_response(user: User, message: str):
    access_token, refresh_token = start_session(user)
    body, status = response(STATUS.CREATED, {
        "code": "created",
        "message": message,
        "type": "success",
        "data": {
            "user": user_summary_schema.dump(user),
            "accessToken": access_token,
        },
    })
    return set_refresh_cookie(body, refresh_token), status


@bp.post("/register")
def register():
    """
    Register a new user and start a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [email, password]
          properties:
            email: { type: string }
            password: { type: string, minLength: 8 }
            role: { type: string, enum: [admin, user] }
    responses:
      201:
        description: Created; access token in body, refresh token in cookie
      400:
        description: Validation error
      403:
        description: Email not allowed to register as admin
    """
    payload = request.get_json(silent=True) or {}
    data = user_register_schema.load(payload)

    session = storage.get_session()
    if session.query(User.id).filter(User.email == data["email"]).first():
        raise ValidationFailed(error={"email": ["User already exists"]})

    role = Role(data["role"])
    if role == Role.ADMIN and data["email"] not in current_app.config["WHITELIST_ADMINS_MAIL"]:
        logger.warning("Refused admin registration for a non-whitelisted email")
        raise PermissionDenied(
            "You don't have permission to register as an admin with this email.",
            status=STATUS.FORBIDDEN,
        )

    user = User(
        username=gen_username(),
        email=data["email"],
        password_hash=hash_password(data["password"]),
        role=role,
    )
    storage.new(user)
    try:
        storage.save()
    except IntegrityError:
        raise ValidationFailed(error={"email": ["User already exists"]})
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while registering the user.") from exc

    logger.info("User registered: %s (role %s)", user.id, role.value)
    return _session_response(user, "User registered successfully.")


@bp.post("/login")
def login():
    """
    Login: returns an access token and sets the refresh token cookie
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      201:
        description: Session created
      400:
        description: Validation error
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    user = authenticate_credentials(data["email"], data["password"])
    logger.info("User logged in: %s", user.id)
    return _session_response(user, "User logged in successfully.")


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange the refresh token cookie for a new access token
    ---
    tags:
      - Auth
    responses:
      200:
        description: New access token
      400:
        description: Missing or malformed refresh token cookie
      401:
        description: Refresh token revoked, expired or invalid
    """
    token = request.cookies.get(REFRESH_COOKIE)
    if not token:
        raise ValidationFailed(error={REFRESH_COOKIE: ["Refresh token is required"]})
    if not JWT_SHAPE.match(token):
        raise ValidationFailed(error={REFRESH_COOKIE: ["Invalid refresh token"]})

    access_token, current_refresh = refresh_session(token)

    body, status = response(STATUS.OK, {
        "code": "success",
        "message": "Access token refreshed successfully.",
        "type": "success",
        "data": {"accessToken": access_token},
    })
    if current_refresh != token:
        set_refresh_cookie(body, current_refresh)
    return body, status


@bp.post("/logout")
@jwt_required()
def logout():
    """
    Logout: revokes the refresh token from the cookie and clears it
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      204:
        description: Logged out
      401:
        description: Unauthorized
    """
    end_session(request.cookies.get(REFRESH_COOKIE), user_id=g.user_id)

    resp = make_response(*response(STATUS.NO_CONTENT))
    clear_refresh_cookie(resp)
    logger.info("User logged out: %s", g.user_id)
    return resp
