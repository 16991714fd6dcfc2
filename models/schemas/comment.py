from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

from models.schemas.common import strip_strings


class CommentCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    content = fields.String(
        required=True,
        validate=validate.Length(min=1, error="Content is required"),
        error_messages={"required": "Content is required"},
    )

    @pre_load
    def trim(self, data, **kwargs):
        return strip_strings(data, ("content",))


class CommentOutSchema(Schema):
    id = fields.String()
    blog_id = fields.String(data_key="blogId")
    user_id = fields.String(data_key="userId")
    content = fields.String()
    created_at = fields.DateTime(data_key="createdAt")
