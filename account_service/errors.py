# account_service/errors.py
from typing import Optional


class AccountError(Exception):
    """Base for every error the account service reports to a client."""

    status_code = 500
    default_message = "Server error"

    def __init__(
        self,
        message: Optional[str] = None,
        user_id: Optional[int] = None,
        error: Optional[str] = None,
    ):
        self.message = message or self.default_message
        self.user_id = user_id
        # internal cause, only shown to clients outside production
        self.error = error
        super().__init__(self.message)


class ValidationError(AccountError):
    status_code = 400
    default_message = "Invalid request"


class ConflictError(AccountError):
    status_code = 400
    default_message = "User already exists"


class AuthError(AccountError):
    status_code = 401
    default_message = "Invalid credentials"


class UnverifiedError(AccountError):
    status_code = 403
    default_message = "Account not verified. OTP sent to email."


class NotFoundError(AccountError):
    status_code = 404
    default_message = "User not found"


class UpstreamError(AccountError):
    status_code = 500
    default_message = "Upstream service unavailable"


class StoreError(UpstreamError):
    default_message = "Database error"


class MailDeliveryError(UpstreamError):
    default_message = "Verification email could not be sent. Request a new OTP."
