from __future__ import annotations

import logging

from flask import Blueprint, request, g
from sqlalchemy.exc import SQLAlchemyError

from models import storage
from models.blog import Blog, BlogStatus
from models.schemas.blog import BlogCreateSchema, BlogUpdateSchema, BlogOutSchema
from models.schemas.common import PaginationSchema, ensure_uuid
from models.user import Role
from utils.decorators import roles_required
from utils.generators import generate_slug

from .errors import InternalError, NotFound, PermissionDenied
from .response import STATUS, response
from .users import parse_pagination

logger = logging.getLogger(__name__)

bp = Blueprint("blogs", __name__)

# Schemas
blog_create_schema = BlogCreateSchema()
blog_update_schema = BlogUpdateSchema()
blog_out_schema = BlogOutSchema()
blogs_out_schema = BlogOutSchema(many=True)
list_pagination_schema = PaginationSchema(max_limit=100)
author_pagination_schema = PaginationSchema(max_limit=50)


def _visible_query(query):
    """Readers with role `user` only see published blogs."""
    if g.user_role == Role.USER.value:
        query = query.filter(Blog.status == BlogStatus.PUBLISHED)
    return query


def _paged_blogs(query, schema: PaginationSchema):
    limit, offset = parse_pagination(schema)
    query = _visible_query(query)
    total = query.count()
    rows = query.order_by(Blog.created_at.desc()).offset(offset).limit(limit).all()
    return response(STATUS.OK, {
        "code": "success",
        "message": "Blogs fetched successfully.",
        "type": "success",
        "data": {
            "limit": limit,
            "offset": offset,
            "total": total,
            "blogs": blogs_out_schema.dump(rows),
        },
    })


def _get_owned_blog(blog_id: str, action: str) -> Blog:
    blog_id = ensure_uuid(blog_id, "blogId", "Invalid blog ID")
    blog = storage.get(Blog, blog_id)
    if not blog:
        raise NotFound(f"We could not find the blog you are trying to {action}.")
    if blog.author_id != g.user_id and g.user_role != Role.ADMIN.value:
        logger.warning("User %s tried to %s blog %s without permission", g.user_id, action, blog.id)
        raise PermissionDenied(
            f"You don't have permission to {action} this blog. Please contact an admin if you need access.",
            status=STATUS.FORBIDDEN,
        )
    return blog


@bp.post("")
@roles_required(["admin"])
def create_blog():
    """
    Create a new blog - admin
    ---
    tags:
      - Blogs
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [title, content]
          properties:
            title: { type: string, maxLength: 180 }
            content: { type: string }
            status: { type: string, enum: [draft, published], default: draft }
            banner:
              type: object
              properties:
                url: { type: string }
                publicId: { type: string }
                width: { type: integer }
                height: { type: integer }
    responses:
      201:
        description: Created
      400:
        description: Validation error
    """
    payload = request.get_json(silent=True) or {}
    data = blog_create_schema.load(payload)

    blog = Blog(
        title=data["title"],
        slug=generate_slug(data["title"]),
        content=data["content"],
        banner=data.get("banner"),
        author_id=g.user_id,
        views_count=0,
        likes_count=0,
        comments_count=0,
    )
    blog.set_status(BlogStatus(data["status"]))
    storage.new(blog)
    try:
        storage.save()
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while creating the blog.") from exc

    logger.info("New blog created: %s by %s", blog.id, g.user_id)
    return response(STATUS.CREATED, {
        "code": "created",
        "message": "Blog created successfully.",
        "type": "success",
        "data": {"blog": blog_out_schema.dump(blog)},
    })


@bp.get("")
@roles_required(["admin", "user"])
def list_blogs():
    """
    List blogs, newest first
    ---
    tags:
      - Blogs
    security:
      - Bearer: []
    parameters:
      - { in: query, name: limit, type: integer, minimum: 1, maximum: 100 }
      - { in: query, name: offset, type: integer, minimum: 0 }
    responses:
      200: { description: OK }
    """
    return _paged_blogs(storage.get_session().query(Blog), list_pagination_schema)


@bp.get("/user/<user_id>")
@roles_required(["admin", "user"])
def list_blogs_by_user(user_id: str):
    """
    List blogs written by a user, newest first
    ---
    tags:
      - Blogs
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
      - { in: query, name: limit, type: integer, minimum: 1, maximum: 50 }
      - { in: query, name: offset, type: integer, minimum: 0 }
    responses:
      200: { description: OK }
      400: { description: Invalid user ID }
    """
    user_id = ensure_uuid(user_id, "userId", "Invalid user ID")
    query = storage.get_session().query(Blog).filter(Blog.author_id == user_id)
    return _paged_blogs(query, author_pagination_schema)


@bp.get("/<slug>")
@roles_required(["admin", "user"])
def get_blog_by_slug(slug: str):
    """
    Get a blog by slug
    ---
    tags:
      - Blogs
    security:
      - Bearer: []
    parameters:
      - { in: path, name: slug, type: string, required: true }
    responses:
      200: { description: OK }
      403: { description: Draft blog requested by a non-admin }
      404: { description: Not found }
    """
    blog = storage.get_session().query(Blog).filter(Blog.slug == slug).first()
    if not blog:
        raise NotFound("We could not find a blog with that slug.")

    if g.user_role == Role.USER.value and blog.status == BlogStatus.DRAFT:
        logger.warning("User %s tried to access draft blog %s", g.user_id, blog.id)
        raise PermissionDenied(
            "This blog is currently in draft. Please contact an admin if you need access.",
            status=STATUS.FORBIDDEN,
        )

    return response(STATUS.OK, {
        "code": "success",
        "message": "Blog fetched successfully.",
        "type": "success",
        "data": {"blog": blog_out_schema.dump(blog)},
    })


@bp.put("/<blog_id>")
@roles_required(["admin"])
def update_blog(blog_id: str):
    """
    Update a blog - admin
    ---
    tags:
      - Blogs
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
          properties:
            title: { type: string, maxLength: 180 }
            content: { type: string }
            status: { type: string, enum: [draft, published] }
            banner: { type: object }
    responses:
      200: { description: Updated }
      403: { description: Forbidden }
      404: { description: Not found }
    """
    payload = request.get_json(silent=True) or {}
    data = blog_update_schema.load(payload)
    blog = _get_owned_blog(blog_id, "update")

    if data.get("title"):
        blog.title = data["title"]
    if data.get("content"):
        blog.content = data["content"]
    if data.get("banner"):
        blog.banner = data["banner"]
    if data.get("status"):
        blog.set_status(BlogStatus(data["status"]))

    try:
        blog.save()
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while updating the blog.") from exc

    logger.info("Blog updated: %s", blog.id)
    return response(STATUS.OK, {
        "code": "success",
        "message": "Blog updated successfully.",
        "type": "success",
        "data": {"blog": blog_out_schema.dump(blog)},
    })


@bp.delete("/<blog_id>")
@roles_required(["admin"])
def delete_blog(blog_id: str):
    """
    Delete a blog with its comments and likes - admin
    ---
    tags:
      - Blogs
    security:
      - Bearer: []
    parameters:
      - { in: path, name: blog_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    blog = _get_owned_blog(blog_id, "delete")
    blog.delete()
    try:
        storage.save()
    except SQLAlchemyError as exc:
        raise InternalError("Something went wrong while deleting the blog.") from exc

    logger.info("Blog deleted: %s", blog.id)
    return response(STATUS.NO_CONTENT)
