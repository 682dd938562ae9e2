"""
Service Errors

Exceptions raised by the service layer. The API maps each one to an HTTP
status in a single exception handler (see main.py), so endpoints never
translate them by hand.
"""


class ServiceError(Exception):
    """Base exception for service errors."""
    status_code = 400

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail or self.__class__.__doc__


class AuthenticationRequiredError(ServiceError):
    """Authentication required."""
    status_code = 401


class PermissionDeniedError(ServiceError):
    """You don't have permission for this action."""
    status_code = 403


class NotFoundError(ServiceError):
    """Resource not found."""
    status_code = 404


class InvariantViolationError(ServiceError):
    """The operation conflicts with the current state."""
    status_code = 409


def require_user(user):
    """Return the caller or raise if the request is anonymous."""
    if user is None:
        raise AuthenticationRequiredError()
    return user
