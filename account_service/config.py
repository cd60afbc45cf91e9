# account_service/config.py
import os
import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

SQLITE_FALLBACK_URL = "sqlite:///./db/accounts.db"


class Settings(BaseModel):
    """Runtime configuration for the account service.

    Built once by the entry point with ``Settings.from_env()`` and handed to
    ``create_app``; tests construct it directly.
    """

    auth_secret_key: str
    database_url: str = SQLITE_FALLBACK_URL
    access_token_expire_minutes: int = 60
    otp_expire_minutes: int = 10
    otp_length: int = 6

    sendgrid_api_key: Optional[str] = None
    mail_from_email: Optional[str] = None

    port: int = 3000
    environment: str = "development"
    cors_origins: List[str] = ["*"]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def mail_configured(self) -> bool:
        return bool(self.sendgrid_api_key and self.mail_from_email)

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()

        secret = os.environ.get("AUTH_SECRET_KEY")
        if not secret:
            raise RuntimeError(
                "AUTH_SECRET_KEY is not set. Please configure it in the environment."
            )

        database_url = os.environ.get("DATABASE_URL")
        if not database_url:
            database_url = SQLITE_FALLBACK_URL
            logger.warning("⚠️ Using SQLite fallback database: %s", database_url)

        origins = os.environ.get("CORS_ORIGINS", "*")

        return cls(
            auth_secret_key=secret,
            database_url=database_url,
            access_token_expire_minutes=int(
                os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
            ),
            otp_expire_minutes=int(os.environ.get("OTP_EXPIRE_MINUTES", 10)),
            otp_length=int(os.environ.get("OTP_LENGTH", 6)),
            sendgrid_api_key=os.environ.get("SENDGRID_API_KEY") or None,
            mail_from_email=os.environ.get("MAIL_FROM_EMAIL") or None,
            port=int(os.environ.get("PORT", 3000)),
            environment=os.environ.get("ENVIRONMENT")
            or os.environ.get("NODE_ENV")
            or "development",
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
