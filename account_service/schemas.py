# account_service/schemas.py
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from .models import Role


# --- Pydantic Schemas ---
class RegisterData(BaseModel):
    username: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)
    role: Optional[Role] = None


class VerifyOTPData(BaseModel):
    userId: int
    otp: str = Field(min_length=1)


class LoginData(BaseModel):
    email: EmailStr
    password: str


class ResendOTPData(BaseModel):
    userId: int


class ProfileUpdate(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phoneNumber: Optional[str] = None
    address: Optional[str] = None


class AccountSummary(BaseModel):
    id: int
    username: str
    email: str
    role: str


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    userId: int


class TokenResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    token: str
    user: AccountSummary
