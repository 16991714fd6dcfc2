from __future__ import annotations

import logging
from typing import Tuple

from flask import Blueprint, request, g, current_app, make_response
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.attributes import flag_modified

from models import storage
from models.blog import Blog
from models.comment import Comment
from models.like import Like
from models.user import User, SOCIAL_LINK_KEYS
from models.schemas.common import PaginationSchema, ensure_uuid
from models.schemas.user import UserUpdateSchema, UserOutSchema
from utils.decorators import roles_required
from utils.security import hash_password

from .auth import clear_refresh_cookie
from .errors import InternalError, NotFound, ValidationFailed
from .response import STATUS, response

logger = logging.getLogger(__name__)

MAX_LIMIT = 50

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)
pagination_schema = PaginationSchema(max_limit=MAX_LIMIT)


def parse_pagination(schema: PaginationSchema = pagination_schema) -> Tuple[int, int]:
    args = schema.load(request.args.to_dict())
    limit = args.get("limit", current_app.config["DEFAULT_RES_LIMIT"])
    offset = args.get("offset", current_app.config["DEFAULT_RES_OFFSET"])
    return min(limit, schema.max_limit), offset


def _get_user_or_404(user_id: str) -> User:
    user_id = ensure_uuid(user_id, "userId", "Invalid user ID")
    user = storage.get(User, user_id)
    if not user:
        raise NotFound("We could not find that user.")
    return user


def delete_account(user: User) -> None:
    """
    Delete a user and everything they own. Counters on other authors' blogs
    are decremented for the likes and comments that disappear with the user.
    """
    session = storage.get_session()
    try:
        liked = (
            session.query(Like.blog_id)
            .join(Blog, Blog.id == Like.blog_id)
            .filter(Like.user_id == user.id, Blog.author_id != user.id)
            .all()
        )
        for (blog_id,) in liked:
            session.query(Blog).filter(Blog.id == blog_id).update(
                {Blog.likes_count: Blog.likes_count - 1}, synchronize_session=False
            )

        commented = (
            session.query(Comment.blog_id, func.count(Comment.id))
            .join(Blog, Blog.id == Comment.blog_id)
            .filter(Comment.user_id == user.id, Blog.author_id != user.id)
            .group_by(Comment.blog_id)
            .all()
        )
        for blog_id, count in commented:
            session.query(Blog).filter(Blog.id == blog_id).update(
                {Blog.comments_count: Blog.comments_count - count}, synchronize_session=False
            )

        # Comments, likes and refresh tokens go with the rows through ON DELETE CASCADE
        blogs_deleted = session.query(Blog).filter(Blog.author_id == user.id).delete(synchronize_session=False)
        storage.delete(user)
        storage.save()
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while deleting the user.") from exc

    logger.info("User account deleted: %s (%d blogs removed)", user.id, blogs_deleted)


@bp.get("/current")
@roles_required(["admin", "user"])
def get_current_user():
    """
    Get the current user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    user = storage.get(User, g.user_id)
    return response(STATUS.OK, {
        "code": "success",
        "message": "Current user fetched successfully.",
        "type": "success",
        "data": {"user": user_out_schema.dump(user)},
    })


@bp.put("/current")
@roles_required(["admin", "user"])
def update_current_user():
    """
    Update the current user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          properties:
            username: { type: string, maxLength: 20 }
            email: { type: string, maxLength: 50 }
            password: { type: string, minLength: 8 }
            firstName: { type: string, maxLength: 20 }
            lastName: { type: string, maxLength: 20 }
            website: { type: string }
            facebook: { type: string }
            instagram: { type: string }
            x: { type: string }
            youtube: { type: string }
    responses:
      200:
        description: Updated
      400:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = user_update_schema.load(payload)

    session = storage.get_session()
    user = storage.get(User, g.user_id)

    conflicts = {}
    if data.get("username") and session.query(User.id).filter(
        User.username == data["username"], User.id != user.id
    ).first():
        conflicts["username"] = ["The username is already in use"]
    if data.get("email") and session.query(User.id).filter(
        User.email == data["email"], User.id != user.id
    ).first():
        conflicts["email"] = ["The email is already in use"]
    if conflicts:
        raise ValidationFailed(error=conflicts)

    for field in ("username", "email", "first_name", "last_name"):
        if data.get(field):
            setattr(user, field, data[field])
    if data.get("password"):
        user.password_hash = hash_password(data["password"])

    links = dict(user.social_links or {})
    for key in SOCIAL_LINK_KEYS:
        if data.get(key):
            links[key] = data[key]
    user.social_links = links
    flag_modified(user, "social_links")

    try:
        user.save()
    except IntegrityError:
        raise ValidationFailed(error={"user": ["The username or email is already in use"]})
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while updating the user.") from exc

    logger.info("User updated: %s", user.id)
    return response(STATUS.OK, {
        "code": "success",
        "message": "User updated successfully.",
        "type": "success",
        "data": {"user": user_out_schema.dump(user)},
    })


@bp.delete("/current")
@roles_required(["admin", "user"])
def delete_current_user():
    """
    Delete the current user and all of their content
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      204:
        description: Deleted
    """
    delete_account(storage.get(User, g.user_id))
    resp = make_response(*response(STATUS.NO_CONTENT))
    return clear_refresh_cookie(resp)


@bp.get("")
@roles_required(["admin"])
def list_users():
    """
    List all users - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: query, name: limit, type: integer, minimum: 1, maximum: 50 }
      - { in: query, name: offset, type: integer, minimum: 0 }
    responses:
      200: { description: OK }
      403: { description: Forbidden }
    """
    limit, offset = parse_pagination()
    session = storage.get_session()
    query = session.query(User)
    total = query.count()
    rows = query.order_by(User.created_at.asc()).offset(offset).limit(limit).all()
    return response(STATUS.OK, {
        "code": "success",
        "message": "Users fetched successfully.",
        "type": "success",
        "data": {
            "limit": limit,
            "offset": offset,
            "total": total,
            "users": user_list_out_schema.dump(rows),
        },
    })


@bp.get("/<user_id>")
@roles_required(["admin"])
def get_user(user_id: str):
    """
    Get a user by id - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    user = _get_user_or_404(user_id)
    return response(STATUS.OK, {
        "code": "success",
        "message": "User fetched successfully.",
        "type": "success",
        "data": {"user": user_out_schema.dump(user)},
    })


@bp.delete("/<user_id>")
@roles_required(["admin"])
def delete_user(user_id: str):
    """
    Delete a user and all of their content - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    delete_account(_get_user_or_404(user_id))
    return response(STATUS.NO_CONTENT)
