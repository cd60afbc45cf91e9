# account_service/lifecycle.py
"""Registration -> OTP verification -> authenticated session.

An account moves ``Unregistered -> PendingVerification -> Verified``. Login on
a pending account never yields a token: it refreshes the OTP, mails it again
and raises ``UnverifiedError``.
"""
import asyncio
import logging
from typing import Optional, Tuple

from .errors import (
    AuthError,
    MailDeliveryError,
    NotFoundError,
    UnverifiedError,
    ValidationError,
)
from .mailer import Mailer
from .models import PROFILE_FIELDS, Account, Role
from .otp import OtpService
from .security import TokenIssuer, hash_password, verify_password
from .store import AccountStore

logger = logging.getLogger(__name__)


class AccountLifecycle:
    def __init__(
        self,
        store: AccountStore,
        otp: OtpService,
        tokens: TokenIssuer,
        mailer: Mailer,
    ):
        self.store = store
        self.otp = otp
        self.tokens = tokens
        self.mailer = mailer

    async def register(
        self, username: str, email: str, password: str, role: Optional[str] = None
    ) -> Account:
        # bcrypt and the session are blocking; keep them off the event loop
        password_hash = await asyncio.to_thread(hash_password, password)
        account = Account(
            username=username,
            email=email,
            password_hash=password_hash,
            role=Role(role or Role.USER).value,
            is_verified=False,
        )
        otp = self.otp.generate(account)
        account = await asyncio.to_thread(self.store.create, account)
        logger.info("Registered account %s (%s)", account.id, account.username)

        await self._send_otp(account, otp)
        return account

    async def verify_otp(self, user_id: int, code: str) -> Tuple[Account, str]:
        account = await self._get(user_id)

        if not self.otp.verify(account, code):
            logger.info("Rejected OTP for account %s", account.id)
            raise ValidationError("Invalid or expired OTP")

        self.otp.consume(account)
        account = await asyncio.to_thread(self.store.save, account)
        logger.info("Account %s verified", account.id)
        return account, self.tokens.issue(account.id, account.role)

    async def login(self, email: str, password: str) -> Tuple[Account, str]:
        account = await asyncio.to_thread(self.store.find_by_email, email)

        # same error and same bcrypt cost for "no such account" and "wrong password"
        password_hash = account.password_hash if account else None
        if not await asyncio.to_thread(verify_password, password, password_hash):
            raise AuthError()

        if not account.is_verified:
            otp = self.otp.generate(account)
            account = await asyncio.to_thread(self.store.save, account)
            await self._send_otp(account, otp)
            logger.info("Login on unverified account %s, OTP resent", account.id)
            raise UnverifiedError(user_id=account.id)

        logger.info("Account %s logged in", account.id)
        return account, self.tokens.issue(account.id, account.role)

    async def resend_otp(self, user_id: int) -> Account:
        account = await self._get(user_id)
        if account.is_verified:
            raise ValidationError("Account already verified", user_id=account.id)

        otp = self.otp.generate(account)
        account = await asyncio.to_thread(self.store.save, account)
        await self._send_otp(account, otp)
        return account

    async def get_profile(self, user_id: int) -> Account:
        return await self._get(user_id)

    async def update_profile(self, user_id: int, fields: dict) -> Account:
        account = await self._get(user_id)
        for key, attr in PROFILE_FIELDS.items():
            value = fields.get(key)
            if value is not None:
                setattr(account, attr, value)
        return await asyncio.to_thread(self.store.save, account)

    async def _get(self, user_id: int) -> Account:
        account = await asyncio.to_thread(self.store.find_by_id, user_id)
        if not account:
            raise NotFoundError()
        return account

    async def _send_otp(self, account: Account, otp: str):
        try:
            await self.mailer.send_otp(account.email, otp, self.otp.expire_minutes)
        except MailDeliveryError as e:
            # the account stays; the client retries through resend-otp
            e.user_id = account.id
            raise
