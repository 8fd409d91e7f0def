"""Failures raised by the auth core.

The HTTP layer maps each class to a status code; nothing here knows about
transport.
"""


class AuthError(Exception):
    detail = "Authentication error"

    def __init__(self, detail: str | None = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class AlreadyExistsError(AuthError):
    detail = "Email already registered"


class NotFoundError(AuthError):
    detail = "User not found"


class InvalidCredentialsError(AuthError):
    detail = "Invalid credentials"


class TrialExpiredError(AuthError):
    detail = "Trial period has expired"


class UnauthorizedError(AuthError):
    detail = "Invalid authentication credentials"


class TokenExpiredError(AuthError):
    detail = "Token expired"


class InvalidTokenError(AuthError):
    detail = "Invalid token"


class NoPendingResetError(AuthError):
    detail = "No password reset pending"


class InternalError(AuthError):
    detail = "Internal server error"


class UniqueViolationError(Exception):
    """Raised by the store when an insert hits the unique email index."""
