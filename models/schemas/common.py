import uuid

from marshmallow import Schema, fields, validate, validates, ValidationError, EXCLUDE


def ensure_uuid(raw: str, field: str, message: str) -> str:
    """Validate a path id; raises a field-level ValidationError (400)."""
    try:
        return str(uuid.UUID(str(raw)))
    except ValueError:
        raise ValidationError({field: [message]})


def strip_strings(data, keys):
    """pre_load helper: trim whitespace on the given string keys."""
    if isinstance(data, dict):
        data = dict(data)
        for key in keys:
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
    return data


class PaginationSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(validate=validate.Range(min=1))
    offset = fields.Integer(
        validate=validate.Range(min=0, error="Offset must be a positive integer")
    )

    def __init__(self, max_limit: int = 100, **kwargs):
        super().__init__(**kwargs)
        self.max_limit = max_limit

    @validates("limit")
    def validate_limit(self, value, **kwargs):
        if value > self.max_limit:
            raise ValidationError(f"Limit must be between 1 and {self.max_limit}")
