"""
Authentication flow: signup, login, refresh, logout and profile update.

The flow is the only writer of password_hash and refresh_token. Store and
token failures come up from the collaborators and are mapped to the
taxonomy in utils.exceptions; nothing is retried here.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

from models.account import Account, LOGGED_OUT, USER
from models.account_store import AccountStore
from models.schemas.account import AccountOutSchema
from models.schemas.common import normalize_email
from utils.exceptions import DuplicateAccount, InvalidCredentials, InvalidToken, NotFound
from utils.security import REFRESH, TokenError, TokenService, hash_password, verify_password

logger = logging.getLogger(__name__)

account_out_schema = AccountOutSchema()


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str

    def to_dict(self) -> Dict[str, str]:
        return {"token": self.access_token, "refreshToken": self.refresh_token}


def sanitize(account: Account) -> Dict[str, Any]:
    """Public view of an account: no password hash, no refresh token."""
    return account_out_schema.dump(account)


class AuthenticationFlow:
    def __init__(self, store: AccountStore, tokens: TokenService):
        self.store = store
        self.tokens = tokens

    def signup(self, email: str, password: str, first_name: str, last_name: str) -> Dict[str, Any]:
        email = normalize_email(email)
        if self.store.find_by_email(email) is not None:
            raise DuplicateAccount()

        account = Account(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
            role=USER,
        )
        try:
            self.store.insert(account)
        except IntegrityError as exc:
            # lost the race against a concurrent signup for the same email
            raise DuplicateAccount() from exc

        logger.info("Account %s created", account.id)
        return sanitize(account)

    def login(self, email: str, password: str) -> TokenPair:
        account = self.store.find_by_email(normalize_email(email))
        if account is None:
            raise NotFound()
        if not verify_password(password, account.password_hash):
            logger.warning("Failed login for account %s", account.id)
            raise InvalidCredentials()

        pair = self._issue_pair(account)
        if self.store.update_fields(account.id, refresh_token=pair.refresh_token) is None:
            raise NotFound()
        logger.info("Account %s logged in", account.id)
        return pair

    def refresh(self, refresh_token: str) -> TokenPair:
        try:
            claims = self.tokens.validate(refresh_token, expected_type=REFRESH)
        except TokenError as exc:
            raise InvalidToken(str(exc)) from exc

        account = self.store.find_by_refresh_token(refresh_token)
        if account is None:
            # rotated out, logged out, or never issued by us
            raise NotFound("No account holds this refresh token")
        if claims.subject != account.id:
            raise InvalidToken("Token subject does not match its account")

        pair = self._issue_pair(account)
        if not self.store.swap_refresh_token(account.id, refresh_token, pair.refresh_token):
            logger.warning("Concurrent refresh lost for account %s", account.id)
            raise NotFound("No account holds this refresh token")
        logger.info("Refresh token rotated for account %s", account.id)
        return pair

    def logout(self, account_id: str) -> None:
        if self.store.update_fields(account_id, refresh_token=LOGGED_OUT) is None:
            raise NotFound()
        logger.info("Account %s logged out", account_id)

    def get_account(self, account_id: str) -> Dict[str, Any]:
        account = self.store.find_by_id(account_id)
        if account is None:
            raise NotFound()
        return sanitize(account)

    def update_profile(
        self,
        account_id: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        password: Optional[str] = None,
    ) -> Dict[str, Any]:
        fields = {}
        if first_name:
            fields["first_name"] = first_name
        if last_name:
            fields["last_name"] = last_name
        if password:
            fields["password_hash"] = hash_password(password)

        if not fields:
            return self.get_account(account_id)
        account = self.store.update_fields(account_id, **fields)
        if account is None:
            raise NotFound()
        logger.info("Account %s updated (%s)", account_id, ", ".join(sorted(fields)))
        return sanitize(account)

    def _issue_pair(self, account: Account) -> TokenPair:
        return TokenPair(
            access_token=self.tokens.issue_access_token(account.id, account.role),
            refresh_token=self.tokens.issue_refresh_token(account.id, account.role),
        )
