# account_service/store.py
import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ConflictError, StoreError
from .models import Account

logger = logging.getLogger(__name__)

# largest id a signed 64-bit INTEGER column can hold
MAX_ACCOUNT_ID = 2**63 - 1


class AccountStore:
    """Single-row reads and writes of ``Account`` over one SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_email_or_username(
        self, email: str, username: str
    ) -> Optional[Account]:
        return self._query(
            lambda: self.db.query(Account)
            .filter(or_(Account.email == email, Account.username == username))
            .first()
        )

    def find_by_email(self, email: str) -> Optional[Account]:
        return self._query(
            lambda: self.db.query(Account).filter(Account.email == email).first()
        )

    def find_by_id(self, account_id: int) -> Optional[Account]:
        if not 0 < account_id <= MAX_ACCOUNT_ID:
            return None
        return self._query(lambda: self.db.get(Account, account_id))

    def create(self, account: Account) -> Account:
        if self.find_by_email_or_username(account.email, account.username):
            raise ConflictError()
        self.db.add(account)
        try:
            self.db.commit()
        except IntegrityError:
            # lost a race against a concurrent registration
            self.db.rollback()
            raise ConflictError()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("❌ Failed to create account %s", account.username)
            raise StoreError(error=str(e))
        self.db.refresh(account)
        return account

    def save(self, account: Account) -> Account:
        try:
            self.db.add(account)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("❌ Failed to save account %s", account.id)
            raise StoreError(error=str(e))
        self.db.refresh(account)
        return account

    def _query(self, fn):
        try:
            return fn()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("❌ Account lookup failed")
            raise StoreError(error=str(e))
