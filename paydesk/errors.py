"""Error taxonomy shared by the services and the HTTP layer."""


class AppError(Exception):
    """Base class; ``status_code`` is what the HTTP layer answers with."""

    status_code = 500

    def __init__(self, message: str = "Server error"):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Duplicate identity fields, mismatched passwords, bad form input."""

    status_code = 400


class CredentialError(ValidationError):
    """The password could not be hashed."""


class NotFoundError(AppError):
    status_code = 404


class TokenNotFound(NotFoundError):
    """No account holds the presented reset token."""

    status_code = 400


class TokenExpired(AppError):
    """The reset token exists but its expiry has passed."""

    status_code = 400


class AuthError(AppError):
    """Bad credentials. Messages stay generic to avoid account enumeration."""

    status_code = 400


class LoginRequired(AuthError):
    """No live session; answered with a redirect to the login page."""


class DependencyError(AppError):
    """Database, SMTP or payment provider failure."""

    status_code = 500
