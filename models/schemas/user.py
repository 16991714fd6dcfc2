from marshmallow import Schema, fields, pre_load, validate, EXCLUDE

from models.schemas.common import strip_strings
from models.user import Role


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _EmailNormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data


class UserRegisterSchema(_EmailNormalizingSchema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(
        required=True,
        validate=validate.Length(max=50, error="Email must be at most 50 characters"),
        error_messages={"required": "Email is required", "invalid": "Invalid email address"},
    )
    password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=8, error="Password must be at least 8 characters long"),
        error_messages={"required": "Password is required"},
    )
    role = fields.String(
        validate=validate.OneOf([r.value for r in Role], error="Role must be either admin or user"),
        load_default=Role.USER.value,
    )


class UserLoginSchema(_EmailNormalizingSchema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(
        required=True,
        validate=validate.Length(max=50, error="Email must be at most 50 characters"),
        error_messages={"required": "Email is required", "invalid": "Invalid email address"},
    )
    password = fields.String(
        required=True,
        load_only=True,
        validate=validate.Length(min=8, error="Password must be at least 8 characters long"),
        error_messages={"required": "Password is required"},
    )


_url = validate.And(
    validate.URL(error="Invalid URL"),
    validate.Length(max=100, error="URL must be at most 100 characters"),
)


class UserUpdateSchema(_EmailNormalizingSchema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(validate=validate.Length(min=1, max=20, error="Username must be at most 20 characters"))
    email = fields.Email(validate=validate.Length(max=50, error="Email must be at most 50 characters"))
    password = fields.String(
        load_only=True,
        validate=validate.Length(min=8, error="Password must be at least 8 characters long"),
    )
    first_name = fields.String(
        data_key="firstName", validate=validate.Length(max=20, error="First name must be at most 20 characters")
    )
    last_name = fields.String(
        data_key="lastName", validate=validate.Length(max=20, error="Last name must be at most 20 characters")
    )
    website = fields.String(validate=_url)
    facebook = fields.String(validate=_url)
    instagram = fields.String(validate=_url)
    x = fields.String(validate=_url)
    youtube = fields.String(validate=_url)

    @pre_load
    def trim(self, data, **kwargs):
        return strip_strings(data, ("username", "firstName", "lastName"))


class UserOutSchema(Schema):
    id = fields.String()
    username = fields.String()
    email = fields.String()
    role = fields.Enum(Role, by_value=True)
    first_name = fields.String(data_key="firstName", allow_none=True)
    last_name = fields.String(data_key="lastName", allow_none=True)
    social_links = fields.Dict(data_key="socialLinks", allow_none=True)
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")


class UserSummarySchema(Schema):
    """Shape returned by register/login."""
    username = fields.String()
    email = fields.String()
    role = fields.Enum(Role, by_value=True)
