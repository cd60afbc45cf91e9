# account_service/otp.py
import hmac
import secrets
from datetime import timedelta

from .models import Account, utcnow

OTP_EXPIRE_MINUTES = 10
OTP_LENGTH = 6


class OtpService:
    """Issues and checks the one-time codes that prove control of an email.

    ``generate`` and ``consume`` only mutate the account; persisting it is the
    caller's job. ``verify`` never says *why* a code was rejected.
    """

    def __init__(
        self,
        expire_minutes: int = OTP_EXPIRE_MINUTES,
        length: int = OTP_LENGTH,
        clock=utcnow,
    ):
        if length < 4:
            raise ValueError("OTP length must be at least 4 digits")
        self.expire_minutes = expire_minutes
        self.length = length
        self.clock = clock

    def generate(self, account: Account) -> str:
        otp = "".join(secrets.choice("0123456789") for _ in range(self.length))
        account.set_otp(otp, self.clock() + timedelta(minutes=self.expire_minutes))
        return otp

    def verify(self, account: Account, submitted) -> bool:
        if not account.otp_code or not account.otp_expires:
            return False
        if not isinstance(submitted, str):
            return False
        matches = hmac.compare_digest(submitted.encode(), account.otp_code.encode())
        return matches and self.clock() <= account.otp_expires

    def consume(self, account: Account):
        account.clear_otp()
        account.is_verified = True
