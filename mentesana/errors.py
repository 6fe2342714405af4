"""
Error taxonomy shared by the persistence adapters and domain operations.

Every failure that reaches the HTTP layer is a ``ServiceError``; the app
renders it as ``{"error": message}`` with the class status code.
"""

from __future__ import annotations


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ServiceError):
    status_code = 400
    default_message = "Bad request"


class Unauthorized(ServiceError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class Conflict(ServiceError):
    status_code = 409
    default_message = "Conflict"


class Internal(ServiceError):
    status_code = 500
    default_message = "Internal server error"
