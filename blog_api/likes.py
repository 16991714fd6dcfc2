from __future__ import annotations

import logging

from flask import Blueprint, g
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import storage
from models.blog import Blog
from models.like import Like
from models.schemas.common import ensure_uuid
from utils.decorators import roles_required

from .errors import InternalError, NotFound, ValidationFailed
from .response import STATUS, response

logger = logging.getLogger(__name__)

bp = Blueprint("likes", __name__)

ALREADY_LIKED = "You've already liked this blog."


@bp.post("/blog/<blog_id>")
@roles_required(["admin", "user"])
def like_blog(blog_id: str):
    """
    Like a blog as the current user
    ---
    tags:
      - Likes
    security:
      - Bearer: []
    parameters:
      - { in: path, name: blog_id, type: string, required: true }
    responses:
      200: { description: Liked; returns likesCount }
      400: { description: Already liked }
      404: { description: Blog not found }
    """
    blog_id = ensure_uuid(blog_id, "blogId", "Invalid blog ID")
    blog = storage.get(Blog, blog_id)
    if not blog:
        raise NotFound("We could not find the blog you want to like.")

    session = storage.get_session()
    if session.query(Like.id).filter(Like.blog_id == blog.id, Like.user_id == g.user_id).first():
        raise ValidationFailed(ALREADY_LIKED)

    storage.new(Like(blog_id=blog.id, user_id=g.user_id))
    blog.likes_count = Blog.likes_count + 1
    try:
        storage.save()
    except IntegrityError:
        raise ValidationFailed(ALREADY_LIKED)
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while liking the blog.") from exc

    session.refresh(blog)
    logger.info("Blog %s liked by %s (likes %d)", blog.id, g.user_id, blog.likes_count)
    return response(STATUS.OK, {
        "code": "success",
        "message": "Blog liked successfully.",
        "type": "success",
        "data": {"likesCount": blog.likes_count},
    })


@bp.delete("/blog/<blog_id>")
@roles_required(["admin", "user"])
def unlike_blog(blog_id: str):
    """
    Remove the current user's like from a blog
    ---
    tags:
      - Likes
    security:
      - Bearer: []
    parameters:
      - { in: path, name: blog_id, type: string, required: true }
    responses:
      204: { description: Unliked }
      404: { description: No like found }
    """
    blog_id = ensure_uuid(blog_id, "blogId", "Invalid blog ID")
    session = storage.get_session()
    like = session.query(Like).filter(Like.blog_id == blog_id, Like.user_id == g.user_id).first()
    if not like:
        raise NotFound("We could not find a like for this blog.")

    blog = storage.get(Blog, blog_id)
    if not blog:
        raise NotFound("We could not find the blog you want to unlike.")

    like.delete()
    blog.likes_count = Blog.likes_count - 1
    try:
        storage.save()
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while unliking the blog.") from exc

    logger.info("Blog %s unliked by %s", blog.id, g.user_id)
    return response(STATUS.NO_CONTENT)
