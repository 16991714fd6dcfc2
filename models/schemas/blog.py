from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

from models.blog import BlogStatus
from models.schemas.common import strip_strings
from models.schemas.user import UserOutSchema

_status = validate.OneOf(
    [s.value for s in BlogStatus],
    error="Status must be one of the value, draft or published",
)


class BannerSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    url = fields.Url(required=True, error_messages={"required": "Banner url is required"})
    public_id = fields.String(data_key="publicId", allow_none=True)
    width = fields.Integer(validate=validate.Range(min=1), allow_none=True)
    height = fields.Integer(validate=validate.Range(min=1), allow_none=True)


class BlogCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(
        required=True,
        validate=[
            validate.Length(min=1, error="Title is required"),
            validate.Length(max=180, error="Title must be less than 180 characters"),
        ],
        error_messages={"required": "Title is required"},
    )
    content = fields.String(
        required=True,
        validate=validate.Length(min=1, error="Content is required"),
        error_messages={"required": "Content is required"},
    )
    status = fields.String(validate=_status, load_default=BlogStatus.DRAFT.value)
    banner = fields.Nested(BannerSchema, allow_none=True)

    @pre_load
    def trim(self, data, **kwargs):
        return strip_strings(data, ("title", "content"))


class BlogUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(
        validate=[
            validate.Length(min=1, error="Title cannot be empty"),
            validate.Length(max=180, error="Title must be less than 180 characters"),
        ]
    )
    content = fields.String(validate=validate.Length(min=1, error="Content cannot be empty"))
    status = fields.String(validate=_status)
    banner = fields.Nested(BannerSchema, allow_none=True)

    @pre_load
    def trim(self, data, **kwargs):
        return strip_strings(data, ("title", "content"))


class BlogOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    slug = fields.String()
    content = fields.String()
    banner = fields.Nested(BannerSchema, allow_none=True)
    author = fields.Nested(UserOutSchema(only=("id", "username", "email", "role", "first_name", "last_name")))
    views_count = fields.Integer(data_key="viewsCount")
    likes_count = fields.Integer(data_key="likesCount")
    comments_count = fields.Integer(data_key="commentsCount")
    status = fields.Enum(BlogStatus, by_value=True)
    published_at = fields.DateTime(data_key="publishedAt", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
