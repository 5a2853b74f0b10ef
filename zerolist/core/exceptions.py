
class ZerolistAPIError(Exception):
    """Base for errors rendered as `{"error": {"code", "message"}}`."""

    status_code = 500
    code = "INTERNAL_ERROR"
    message = "An unexpected error occurred"

    def __init__(self, message: str = None, headers: dict = None):
        self.message = message or self.message
        self.headers = headers or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": {"code": self.code, "message": self.message}}

# Auth

class UnauthorizedError(ZerolistAPIError):
    status_code = 401
    code = "UNAUTHORIZED"
    message = "Authentication required"

class InvalidCredentialsError(ZerolistAPIError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid or expired access token"

class ForbiddenError(ZerolistAPIError):
    status_code = 403
    code = "FORBIDDEN"
    message = "Access denied"

# Validation

class ValidationError(ZerolistAPIError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Invalid request"

class InvalidEmailError(ZerolistAPIError):
    status_code = 400
    code = "INVALID_EMAIL"
    message = "Invalid email address"

# Resources

class NotFoundError(ZerolistAPIError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"

    def __init__(self, resource: str = None, headers: dict = None):
        super().__init__(f"{resource} not found" if resource else None, headers)

class WaitlistNotFoundError(ZerolistAPIError):
    status_code = 404
    code = "WAITLIST_NOT_FOUND"
    message = "Waitlist not found"

class SignupNotFoundError(ZerolistAPIError):
    status_code = 404
    code = "SIGNUP_NOT_FOUND"
    message = "Signup not found"

# Conflicts

class AlreadyExistsError(ZerolistAPIError):
    status_code = 409
    code = "ALREADY_EXISTS"
    message = "Resource already exists"

    def __init__(self, resource: str = None, headers: dict = None):
        super().__init__(f"{resource} already exists" if resource else None, headers)

class AlreadySignedUpError(ZerolistAPIError):
    status_code = 409
    code = "ALREADY_SIGNED_UP"
    message = "This email is already on the waitlist"

class AlreadyConfirmedError(ZerolistAPIError):
    status_code = 409
    code = "ALREADY_CONFIRMED"
    message = "This email is already confirmed"

# Rate limiting

class RateLimitedError(ZerolistAPIError):
    status_code = 429
    code = "RATE_LIMITED"
    message = "Too many requests. Please try again later."

# Server

class InternalError(ZerolistAPIError):
    pass

class EmailError(ZerolistAPIError):
    status_code = 500
    code = "EMAIL_ERROR"
    message = "Failed to send email. Please try again."

class DatabaseInsertError(InternalError):
    message = "Failed to save changes"
