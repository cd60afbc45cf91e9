# account_service/security.py
from datetime import timedelta
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from .errors import AuthError
from .models import utcnow

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60  # 1 hour

# Password Hashing: bcrypt salts every hash and verify() recomputes it
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        # burn a bcrypt round so unknown accounts answer as slowly as known ones
        pwd_context.dummy_verify()
        return False
    return pwd_context.verify(plain_password, hashed_password)


class TokenIssuer:
    """Mints and checks the signed session tokens handed out after login."""

    def __init__(
        self,
        secret_key: str,
        expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES,
        algorithm: str = ALGORITHM,
        clock=utcnow,
    ):
        if not secret_key:
            raise ValueError("A token signing secret is required")
        self.secret_key = secret_key
        self.expire_minutes = expire_minutes
        self.algorithm = algorithm
        self.clock = clock

    def issue(self, account_id: int, role: Optional[str] = None) -> str:
        now = self.clock()
        to_encode = {
            "sub": str(account_id),
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        if role:
            to_encode["role"] = role
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        """Return the claims of a valid token.

        Raises ``AuthError`` for a bad signature, an expired token or a token
        without a subject.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError:
            raise AuthError("Token expired")
        except JWTError:
            raise AuthError("Invalid token")
        return payload

    def account_id(self, token: str) -> int:
        try:
            return int(self.decode(token)["sub"])
        except (KeyError, ValueError):
            raise AuthError("Invalid token")
