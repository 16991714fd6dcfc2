"""
Uniform JSON envelope shared by every endpoint and error handler.

Success: {"success": true, "code", "message", "type", "data"}
Error:   {"success": false, "code", "message", "type", "error"?, "detail"?}
"""
from __future__ import annotations

from typing import Any, NamedTuple

from flask import jsonify


class HttpStatus(NamedTuple):
    code: str
    status: int


class STATUS:
    OK = HttpStatus("OK", 200)
    CREATED = HttpStatus("CREATED", 201)
    NO_CONTENT = HttpStatus("NO_CONTENT", 204)
    BAD_REQUEST = HttpStatus("BAD_REQUEST", 400)
    UNAUTHORIZED = HttpStatus("UNAUTHORIZED", 401)
    FORBIDDEN = HttpStatus("FORBIDDEN", 403)
    NOT_FOUND = HttpStatus("NOT_FOUND", 404)
    METHOD_NOT_ALLOWED = HttpStatus("METHOD_NOT_ALLOWED", 405)
    PAYLOAD_TOO_LARGE = HttpStatus("PAYLOAD_TOO_LARGE", 413)
    TOO_MANY_REQUESTS = HttpStatus("TOO_MANY_REQUESTS", 429)
    INTERNAL_SERVER_ERROR = HttpStatus("INTERNAL_SERVER_ERROR", 500)

    @classmethod
    def from_code(cls, status: int) -> HttpStatus:
        for value in vars(cls).values():
            if isinstance(value, HttpStatus) and value.status == status:
                return value
        return HttpStatus("ERROR", status)


def response(status: HttpStatus, payload: dict | str | None = None, extra: Any = None):
    """
    Build a (body, status) pair.

    `payload` is either a message string or a dict merged into the body
    (its `code` and `message` win over the defaults). `extra` goes to
    `error` when it is a mapping/list and to `detail` when it is a string.
    """
    if status.status == 204:
        return "", 204

    body: dict[str, Any] = {"success": status.status < 400, "code": status.code}

    if isinstance(payload, str):
        body["message"] = payload
    elif isinstance(payload, dict):
        body.update(payload)

    if isinstance(extra, (dict, list)):
        body.setdefault("error", extra)
    elif isinstance(extra, str):
        body.setdefault("detail", extra)

    if not body["success"] and not body.get("message"):
        body["message"] = status.code

    return jsonify(body), status.status
