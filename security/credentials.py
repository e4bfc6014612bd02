"""
Persistence of admin accounts.

The auth layer only talks to a store through ``find_account_by_username``,
``create_account`` and ``update_account``; the SQLAlchemy implementation
below is the one wired up when ``DATABASE_URL`` is set. Any database error
is rolled back and surfaced as ``StoreUnavailable``.
"""
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.admin_user import AdminUser
from security.errors import AccountExists, StoreUnavailable

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = {
    "password_hash",
    "failed_login_attempts",
    "locked_until",
    "last_password_change",
}


class SqlAlchemyCredentialStore:
    def __init__(self, session):
        self.session = session

    def find_account_by_username(self, username: str):
        try:
            return self.session.query(AdminUser).filter_by(username=username).first()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreUnavailable("Admin lookup failed") from exc

    def create_account(self, username: str, password_hash: str) -> AdminUser:
        account = AdminUser(username=username, password_hash=password_hash)
        try:
            self.session.add(account)
            self.session.commit()
        except IntegrityError as exc:
            self._rollback()
            raise AccountExists() from exc
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreUnavailable("Admin create failed") from exc
        return account

    def update_account(self, account_id: int, **fields) -> AdminUser:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update admin fields: {sorted(unknown)}")

        try:
            account = self.session.get(AdminUser, account_id)
            if account is None:
                raise StoreUnavailable(f"Admin {account_id} disappeared")
            for name, value in fields.items():
                setattr(account, name, value)
            self.session.commit()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreUnavailable("Admin update failed") from exc
        return account

    def _rollback(self):
        try:
            self.session.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed")
