"""Domain errors raised by the authentication services.

Every ``AuthError`` carries the HTTP status it maps to; the handler
registered in ``main.py`` turns it into a ``{"detail": ...}`` response.
``ConfigurationError`` is not an ``AuthError``: it only happens at startup.
"""


class ConfigurationError(RuntimeError):
    """Invalid or missing configuration. The process must not start."""


class AuthError(Exception):
    """Base class for errors recovered at the HTTP boundary."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(AuthError):
    """Malformed or missing field, weak password, bad email, bad username length."""

    status_code = 400


class ConflictError(AuthError):
    """Registration attempted while an account exists, or a unique value is taken."""

    status_code = 409


class UnauthenticatedError(AuthError):
    """Unknown user or wrong password at login."""

    status_code = 401


class InvalidCredentialsError(AuthError):
    """Wrong current password for an already authenticated caller."""

    status_code = 401


class NotFoundError(AuthError):
    """The authenticated subject no longer resolves to a stored account."""

    status_code = 404
