"""User domain service: register, login (lockout), change PIN, admin unlock.

Login state machine per account:
    Active + correct PIN  -> attempts reset to 0, success
    Active + wrong PIN    -> attempts + 1; reaching MAX_LOGIN_ATTEMPTS locks
    Locked                -> always AccountLockedError (checked before the PIN)

There is no automatic unlock; ``unlock`` is an administrative operation.
"""

import logging
import re
from decimal import Decimal

from config.settings import settings
from src.bank_account.domain.constants import INITIAL_BALANCE_MAX, INITIAL_BALANCE_MIN
from src.bank_account.domain.models import Account
from src.bank_account.domain.repository import BankStoreProtocol
from src.bank_common.errors import (
    AccountLockedError,
    AccountNotFoundError,
    InvalidCredentialsError,
    ValidationError,
    WrongPinError,
)
from src.bank_common.money import quantize
from src.bank_common.random_source import RandomSourceProtocol, SystemRandomSource
from src.bank_gateway.auth.password import hash_pin, verify_pin

logger = logging.getLogger("bank.auth")

_PIN_RE = re.compile(r"^\d{4}$")


def _require_pin_format(pin: str, field: str) -> None:
    if not _PIN_RE.fullmatch(pin):
        raise ValidationError(field, "PIN must be exactly 4 digits")


class UserService:
    def __init__(
        self,
        store: BankStoreProtocol,
        rng: RandomSourceProtocol | None = None,
        max_login_attempts: int | None = None,
    ) -> None:
        self._store = store
        self._rng: RandomSourceProtocol = rng or SystemRandomSource()
        self._max_attempts = max_login_attempts or settings.MAX_LOGIN_ATTEMPTS

    async def register(self, username: str, pin: str, confirm_pin: str) -> Account:
        """Create an Active account with a random opening balance.

        Raises UsernameExistsError if the username is taken (exact match).
        """
        if not username or len(username) > 64:
            raise ValidationError("username", "Username must be 1-64 characters")
        _require_pin_format(pin, "pin")
        if pin != confirm_pin:
            raise ValidationError("confirmPin", "PINs do not match")

        opening = quantize(
            Decimal(self._rng.randint(INITIAL_BALANCE_MIN, INITIAL_BALANCE_MAX))
        )
        credential_hash = hash_pin(pin)
        async with self._store.unit_of_work() as uow:
            account = await uow.insert(username, credential_hash, opening)
        logger.info("registered account=%s username=%s", account.id, username)
        return account

    async def login(self, username: str, pin: str) -> Account:
        """Authenticate and return the account.

        "Unknown user" and "wrong PIN" both raise InvalidCredentialsError; only
        the latter reports the remaining attempts.
        """
        failure: InvalidCredentialsError | None = None
        async with self._store.unit_of_work() as uow:
            account = await uow.get_by_username(username, for_update=True)
            if account is None:
                raise InvalidCredentialsError()
            if account.is_locked:
                raise AccountLockedError()

            if verify_pin(pin, account.credential_hash):
                if account.login_attempts:
                    account = await uow.update(account.id, login_attempts=0)
            else:
                attempts = account.login_attempts + 1
                locked = attempts >= self._max_attempts
                await uow.update(account.id, login_attempts=attempts, is_locked=locked)
                failure = InvalidCredentialsError(max(0, self._max_attempts - attempts))
                if locked:
                    logger.warning("account locked account=%s username=%s", account.id, username)
                else:
                    logger.info("failed login account=%s attempts=%d", account.id, attempts)

        # Raised after the unit of work so the attempt counter is committed
        if failure is not None:
            raise failure
        return account

    async def get_account(self, account_id: int) -> Account:
        async with self._store.unit_of_work() as uow:
            account = await uow.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def change_pin(
        self, account_id: int, current_pin: str, new_pin: str, confirm_pin: str
    ) -> None:
        _require_pin_format(new_pin, "newPin")
        if new_pin != confirm_pin:
            raise ValidationError("confirmPin", "PINs do not match")

        async with self._store.unit_of_work() as uow:
            account = await uow.get(account_id, for_update=True)
            if account is None:
                raise AccountNotFoundError(account_id)
            if not verify_pin(current_pin, account.credential_hash):
                raise WrongPinError()
            await uow.update(account_id, credential_hash=hash_pin(new_pin))
        logger.info("pin changed account=%s", account_id)

    async def unlock(self, username: str) -> Account:
        """Administrative unlock: clears the lock flag and the attempt counter."""
        async with self._store.unit_of_work() as uow:
            account = await uow.get_by_username(username, for_update=True)
            if account is None:
                raise AccountNotFoundError(username)
            account = await uow.update(account.id, is_locked=False, login_attempts=0)
        logger.warning("account unlocked by admin account=%s", account.id)
        return account
