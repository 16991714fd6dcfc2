import logging

from flask import current_app
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from .response import STATUS, HttpStatus, response

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base for errors that map straight onto a response envelope."""

    status: HttpStatus = STATUS.INTERNAL_SERVER_ERROR
    code = "internal_error"
    type = "server_error"
    message = "Something went wrong."

    def __init__(self, message: str | None = None, *, status: HttpStatus | None = None,
                 error=None, detail: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        if status is not None:
            self.status = status
        self.error = error
        self.detail = detail

    def to_payload(self) -> dict:
        payload = {"code": self.code, "message": self.message, "type": self.type}
        if self.error is not None:
            payload["error"] = self.error
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


class ValidationFailed(ApiError):
    status = STATUS.BAD_REQUEST
    code = "validation_failed"
    type = "validation_error"
    message = "Please check the provided information and try again."


class PermissionDenied(ApiError):
    status = STATUS.UNAUTHORIZED
    code = "permission_denied"
    type = "authorization_error"
    message = "You don't have permission to perform this action right now."


class NotFound(ApiError):
    status = STATUS.NOT_FOUND
    code = "not_found"
    type = "resource_error"
    message = "We could not find the requested resource."


class PayloadTooLarge(ApiError):
    status = STATUS.PAYLOAD_TOO_LARGE
    code = "validation_failed"
    type = "validation_error"
    message = "The request payload is too large."


class RateLimited(ApiError):
    status = STATUS.TOO_MANY_REQUESTS
    code = "rate_limited"
    type = "rate_limit_error"
    message = "You have sent too many requests in a given amount of time! Please try again later."


class InternalError(ApiError):
    pass


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(err: ApiError):
        if isinstance(err, InternalError):
            logger.error("Internal error: %s", err.message, exc_info=err.__cause__ or err)
        return response(err.status, err.to_payload())

    # Marshmallow validation errors map to 400
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        failed = ValidationFailed(error=err.messages)
        return response(failed.status, failed.to_payload())

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(err):
        too_large = PayloadTooLarge()
        return response(too_large.status, too_large.to_payload())

    # Werkzeug HTTPExceptions (unknown route, wrong method, bad JSON) keep their status
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = STATUS.from_code(err.code or 400)
        code = "not_found" if status.status == 404 else status.code.lower()
        return response(status, {"code": code, "message": err.description})

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        detail = None
        if current_app and current_app.debug:
            detail = err.__class__.__name__
        return response(
            STATUS.INTERNAL_SERVER_ERROR,
            {"code": "internal_error", "message": "An unexpected error occurred", "type": "server_error"},
            detail,
        )
