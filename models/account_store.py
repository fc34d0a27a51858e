"""
Credential store: the only place account records are read or written.

All methods run on the DBStorage scoped session and commit before returning.
Connectivity failures surface as StoreUnavailable; IntegrityError (e.g. the
unique email index) is rolled back and re-raised for the caller to map.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError

from models.account import Account
from models.base_model import utcnow
from utils.exceptions import StoreUnavailable

logger = logging.getLogger(__name__)

# Columns update_fields() may touch; id, email and created_at are fixed after insert
UPDATABLE_FIELDS = frozenset({"first_name", "last_name", "password_hash", "role", "refresh_token"})


def _guarded(fn):
    @wraps(fn)
    def wrapper(self, *args, **kwargs):
        try:
            return fn(self, *args, **kwargs)
        except OperationalError as exc:
            self.storage.rollback()
            logger.error("Account store unavailable during %s: %s", fn.__name__, exc.orig)
            raise StoreUnavailable() from exc
    return wrapper


class AccountStore:
    def __init__(self, storage):
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    @_guarded
    def find_by_email(self, email: str) -> Optional[Account]:
        return self.session.query(Account).filter(Account.email == email).first()

    @_guarded
    def find_by_id(self, account_id: str) -> Optional[Account]:
        return self.session.get(Account, account_id)

    @_guarded
    def find_by_refresh_token(self, token: str) -> Optional[Account]:
        if not token:
            return None
        return self.session.query(Account).filter(Account.refresh_token == token).first()

    @_guarded
    def list_all(self, offset: int = 0, limit: Optional[int] = None) -> List[Account]:
        query = self.session.query(Account).order_by(Account.created_at.asc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    @_guarded
    def count(self) -> int:
        return self.session.query(Account).count()

    @_guarded
    def insert(self, account: Account) -> Account:
        self.storage.new(account)
        try:
            self.storage.save()
        except IntegrityError:
            logger.info("Insert rejected by unique constraint for %s", account.email)
            raise
        return account

    @_guarded
    def update_fields(self, account_id: str, **fields) -> Optional[Account]:
        """
        Overwrite only the given columns (plus updated_at) in one UPDATE and
        return the post-update record, or None when the id does not resolve.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not updatable: {sorted(unknown)}")
        values = dict(fields, updated_at=utcnow())
        matched = (
            self.session.query(Account)
            .filter(Account.id == account_id)
            .update(values, synchronize_session=False)
        )
        self.storage.save()
        if not matched:
            return None
        return self._reload(account_id)

    @_guarded
    def swap_refresh_token(self, account_id: str, expected: str, new: str) -> bool:
        """
        Compare-and-swap on refresh_token: write `new` only if the stored value
        still equals `expected`. Returns False when another writer got there first.
        """
        matched = (
            self.session.query(Account)
            .filter(Account.id == account_id, Account.refresh_token == expected)
            .update({"refresh_token": new, "updated_at": utcnow()}, synchronize_session=False)
        )
        self.storage.save()
        return matched == 1

    @_guarded
    def delete(self, account_id: str) -> bool:
        account = self.session.get(Account, account_id)
        if account is None:
            return False
        self.storage.delete(account)
        self.storage.save()
        return True

    def _reload(self, account_id: str) -> Optional[Account]:
        account = self.session.get(Account, account_id)
        if account is not None:
            self.session.refresh(account)
        return account
