"""
Error taxonomy for django-blog-cms.

Every error carries the HTTP status it maps to, so views and the admin
client translate in both directions with the same table.
"""


class BlogCMSError(Exception):
    """Base class for all blog_cms errors."""

    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


class ValidationError(BlogCMSError):
    """Bad input. ``errors`` maps field names to lists of messages."""

    status_code = 400
    default_message = "Please check the submitted fields."

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self):
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class AccessDeniedError(BlogCMSError):
    status_code = 403
    default_message = "This post is currently a draft."


class NotFoundError(BlogCMSError):
    status_code = 404
    default_message = "Not found."


class ConflictError(BlogCMSError):
    status_code = 409
    default_message = "The resource conflicts with an existing one."


class StorageError(BlogCMSError):
    status_code = 500
    default_message = "The storage backend failed."


ERRORS_BY_STATUS = {
    cls.status_code: cls
    for cls in (ValidationError, AccessDeniedError, NotFoundError, ConflictError)
}


def error_for_status(status_code, payload=None):
    """
    Build the error matching an HTTP error response.

    Args:
        status_code: HTTP status of the response
        payload: decoded JSON body, if any

    Returns:
        BlogCMSError instance (StorageError for 5xx and unknown codes)
    """
    payload = payload if isinstance(payload, dict) else {}
    message = payload.get("error")
    cls = ERRORS_BY_STATUS.get(status_code, StorageError)
    if cls is ValidationError:
        return ValidationError(message, errors=payload.get("errors"))
    return cls(message)
