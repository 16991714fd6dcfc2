from __future__ import annotations

import logging

from flask import Blueprint, request, g
from sqlalchemy.exc import SQLAlchemyError

from models import storage
from models.blog import Blog
from models.comment import Comment
from models.schemas.comment import CommentCreateSchema, CommentOutSchema
from models.schemas.common import ensure_uuid
from models.user import Role
from utils.decorators import roles_required

from .errors import InternalError, NotFound, PermissionDenied
from .response import STATUS, response

logger = logging.getLogger(__name__)

bp = Blueprint("comments", __name__)

comment_create_schema = CommentCreateSchema()
comment_out_schema = CommentOutSchema()
comments_out_schema = CommentOutSchema(many=True)


@bp.post("/blog/<blog_id>")
@roles_required(["admin", "user"])
def comment_blog(blog_id: str):
    """
    Comment on a blog
    ---
    tags:
      - Comments
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - { in: path, name: blog_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          required: [content]
          properties:
            content: { type: string }
    responses:
      201: { description: Created }
      404: { description: Blog not found }
    """
    blog_id = ensure_uuid(blog_id, "blogId", "Invalid blog ID")
    data = comment_create_schema.load(request.get_json(silent=True) or {})

    blog = storage.get(Blog, blog_id)
    if not blog:
        raise NotFound("We could not find the blog you want to comment on.")

    comment = Comment(blog_id=blog.id, user_id=g.user_id, content=data["content"])
    storage.new(comment)
    blog.comments_count = Blog.comments_count + 1
    try:
        storage.save()
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while adding the comment.") from exc

    logger.info("New comment %s on blog %s", comment.id, blog.id)
    return response(STATUS.CREATED, {
        "code": "created",
        "message": "Comment added successfully.",
        "type": "success",
        "data": {"comment": comment_out_schema.dump(comment)},
    })


@bp.get("/blog/<blog_id>")
@roles_required(["admin", "user"])
def get_comments_by_blog(blog_id: str):
    """
    Comments of a blog, newest first
    ---
    tags:
      - Comments
    security:
      - Bearer: []
    parameters:
      - { in: path, name: blog_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Blog not found }
    """
    blog_id = ensure_uuid(blog_id, "blogId", "Invalid blog ID")
    if not storage.get(Blog, blog_id):
        raise NotFound("We could not find the requested blog.")

    comments = (
        storage.get_session()
        .query(Comment)
        .filter(Comment.blog_id == blog_id)
        .order_by(Comment.created_at.desc())
        .all()
    )
    return response(STATUS.OK, {
        "code": "success",
        "message": "Comments fetched successfully.",
        "type": "success",
        "data": {"comments": comments_out_schema.dump(comments)},
    })


@bp.delete("/<comment_id>")
@roles_required(["admin", "user"])
def delete_comment(comment_id: str):
    """
    Delete a comment - owner or admin
    ---
    tags:
      - Comments
    security:
      - Bearer: []
    parameters:
      - { in: path, name: comment_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      403: { description: Not the owner }
      404: { description: Not found }
    """
    comment_id = ensure_uuid(comment_id, "commentId", "Invalid comment ID")
    comment = storage.get(Comment, comment_id)
    if not comment:
        raise NotFound("We could not find the comment you are trying to delete.")

    blog = storage.get(Blog, comment.blog_id)
    if not blog:
        raise NotFound("We could not find the associated blog.")

    if comment.user_id != g.user_id and g.user_role != Role.ADMIN.value:
        logger.warning("User %s tried to delete comment %s without permission", g.user_id, comment.id)
        raise PermissionDenied(
            "You don't have permission to remove this comment. Please contact an admin if this seems wrong.",
            status=STATUS.FORBIDDEN,
        )

    comment.delete()
    blog.comments_count = Blog.comments_count - 1
    try:
        storage.save()
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while deleting the comment.") from exc

    logger.info("Comment %s deleted from blog %s", comment.id, blog.id)
    return response(STATUS.NO_CONTENT)
