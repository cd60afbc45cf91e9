# account_service/models.py
import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from .database import Base


def utcnow() -> datetime:
    # Naive UTC, SQLite drops tzinfo on DateTime columns
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "phoneNumber": "phone_number",
    "address": "address",
}


# --- Database Model: Account ---
class Account(Base):
    __tablename__ = "accounts"
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, default=Role.USER.value, nullable=False)
    is_verified = Column(Boolean, default=False, nullable=False)

    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    phone_number = Column(String, nullable=True)
    address = Column(String, nullable=True)

    otp_code = Column(String, nullable=True)
    otp_expires = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def profile(self) -> dict:
        return {key: getattr(self, attr) for key, attr in PROFILE_FIELDS.items()}

    def set_otp(self, code: str, expires: datetime):
        self.otp_code = code
        self.otp_expires = expires

    def clear_otp(self):
        self.otp_code = None
        self.otp_expires = None

    def summary(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
        }

    def public_dict(self) -> dict:
        """Everything a client may see about the account (no hash, no OTP)."""
        return {
            **self.summary(),
            "isVerified": self.is_verified,
            "profile": self.profile,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Account id={self.id} username={self.username!r}>"
