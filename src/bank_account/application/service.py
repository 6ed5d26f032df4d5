"""BankingService: the balance-mutation engine.

Every mutating operation runs inside one store unit of work:
  1. load + lock the account row(s)   (serializes concurrent requests)
  2. validate business rules          (bounds, funds, counterparties)
  3. write the new balance(s)
  4. append the ledger entry/entries
  5. commit on exit (rollback on any exception)

Amount bounds are checked before the unit of work is opened, so a rejected
request touches neither balances nor the ledger.
"""

import logging
from decimal import Decimal

from src.bank_account.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    MobileRechargeResponse,
    OperationResponse,
    SpinResponse,
    StreamingCatalogItem,
    StreamingResponse,
    TransactionsResponse,
    TransferResponse,
)
from src.bank_account.domain import constants as c
from src.bank_account.domain.models import Account, NewLedgerEntry
from src.bank_account.domain.repository import BankStoreProtocol, BankUnitOfWorkProtocol
from src.bank_common.enums import DEBIT_KINDS, LedgerKind, MobileOperator, SpinOutcome
from src.bank_common.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    RecipientNotFoundError,
    SelfTransferError,
    ValidationError,
)
from src.bank_common.money import ZERO, format_amount, parse_amount, quantize, require_within
from src.bank_common.random_source import RandomSourceProtocol, SystemRandomSource

logger = logging.getLogger("bank.engine")


async def _load_for_update(uow: BankUnitOfWorkProtocol, account_id: int) -> Account:
    account = await uow.get(account_id, for_update=True)
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


def _require_funds(account: Account, amount: Decimal) -> None:
    if account.balance < amount:
        raise InsufficientFundsError(format_amount(amount), format_amount(account.balance))


class BankingService:
    def __init__(
        self,
        store: BankStoreProtocol,
        rng: RandomSourceProtocol | None = None,
    ) -> None:
        self._store = store
        self._rng: RandomSourceProtocol = rng or SystemRandomSource()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_balance(self, account_id: int) -> BalanceResponse:
        async with self._store.unit_of_work() as uow:
            account = await uow.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return BalanceResponse.from_amount(account.balance)

    async def list_transactions(self, account_id: int) -> TransactionsResponse:
        async with self._store.unit_of_work() as uow:
            entries = await uow.list_by_account(account_id)
        return TransactionsResponse(transactions=[LedgerEntryItem.from_entry(e) for e in entries])

    def streaming_catalog(self) -> list[StreamingCatalogItem]:
        return [
            StreamingCatalogItem(id=service_id, name=name, price=format_amount(price))
            for service_id, (name, price) in c.STREAMING_CATALOG.items()
        ]

    # ------------------------------------------------------------------
    # Single-sided operations
    # ------------------------------------------------------------------

    async def _apply(
        self,
        account_id: int,
        kind: LedgerKind,
        amount: Decimal,
        description: str,
        metadata: dict[str, object] | None = None,
    ) -> Account:
        """Credit or debit ``amount`` and record one ledger entry of ``kind``."""
        debit = kind in DEBIT_KINDS
        async with self._store.unit_of_work() as uow:
            account = await _load_for_update(uow, account_id)
            if debit:
                _require_funds(account, amount)
                new_balance = quantize(account.balance - amount)
            else:
                new_balance = quantize(account.balance + amount)
            account = await uow.update(account_id, balance=new_balance)
            await uow.append(
                NewLedgerEntry(
                    account_id=account_id,
                    kind=kind,
                    amount=amount,
                    description=description,
                    metadata=metadata,
                )
            )
        logger.info(
            "%s account=%s amount=%s balance=%s",
            kind.value, account_id, format_amount(amount), format_amount(account.balance),
        )
        return account

    async def withdraw(self, account_id: int, raw_amount: object) -> OperationResponse:
        amount = parse_amount(raw_amount)
        require_within(amount, c.WITHDRAW_MIN, c.WITHDRAW_MAX)
        account = await self._apply(account_id, LedgerKind.WITHDRAW, amount, "Cash withdrawal")
        return OperationResponse.from_result(account.balance, amount)

    async def deposit(self, account_id: int, raw_amount: object) -> OperationResponse:
        amount = parse_amount(raw_amount)
        require_within(amount, c.DEPOSIT_MIN, c.DEPOSIT_MAX)
        account = await self._apply(account_id, LedgerKind.DEPOSIT, amount, "Cash deposit")
        return OperationResponse.from_result(account.balance, amount)

    async def mobile_recharge(
        self,
        account_id: int,
        phone_number: str,
        operator: str,
        raw_amount: object,
    ) -> MobileRechargeResponse:
        phone_number = phone_number.strip()
        if not (c.PHONE_MIN_LENGTH <= len(phone_number) <= c.PHONE_MAX_LENGTH):
            raise ValidationError(
                "phoneNumber",
                f"Phone number must be {c.PHONE_MIN_LENGTH}-{c.PHONE_MAX_LENGTH} characters",
            )
        try:
            carrier = MobileOperator(operator.strip().lower())
        except ValueError:
            allowed = ", ".join(op.value for op in MobileOperator)
            raise ValidationError("operator", f"Operator must be one of: {allowed}") from None
        amount = parse_amount(raw_amount)
        require_within(amount, c.RECHARGE_MIN, c.RECHARGE_MAX)

        label = carrier.value.upper()
        account = await self._apply(
            account_id,
            LedgerKind.MOBILE_RECHARGE,
            amount,
            f"{label} recharge - {phone_number}",
            {"phoneNumber": phone_number, "operator": carrier.value},
        )
        return MobileRechargeResponse(
            new_balance=format_amount(account.balance),
            amount=format_amount(amount),
            phone_number=phone_number,
            operator=label,
        )

    async def pay_streaming(
        self, account_id: int, service: str, quoted_price: object | None = None
    ) -> StreamingResponse:
        service_id = service.strip().lower()
        if service_id not in c.STREAMING_CATALOG:
            raise ValidationError("service", f"Unknown streaming service: {service}")
        name, price = c.STREAMING_CATALOG[service_id]
        if quoted_price is not None and parse_amount(quoted_price, "price") != price:
            raise ValidationError(
                "price", f"Price for {name} is {format_amount(price)}"
            )

        account = await self._apply(
            account_id,
            LedgerKind.SERVICE,
            price,
            f"{name} subscription",
            {"service": service_id},
        )
        return StreamingResponse(
            new_balance=format_amount(account.balance),
            amount=format_amount(price),
            service=name,
        )

    # ------------------------------------------------------------------
    # Transfer (two-sided)
    # ------------------------------------------------------------------

    async def transfer(
        self,
        account_id: int,
        recipient_username: str,
        raw_amount: object,
        note: str | None = None,
    ) -> TransferResponse:
        amount = parse_amount(raw_amount)
        require_within(amount, c.TRANSFER_MIN, c.TRANSFER_MAX)
        note = note.strip() if note else None
        if note and len(note) > c.TRANSFER_NOTE_MAX_LENGTH:
            raise ValidationError(
                "note", f"Note must be at most {c.TRANSFER_NOTE_MAX_LENGTH} characters"
            )
        metadata = {"note": note} if note else None

        async with self._store.unit_of_work() as uow:
            sender = await uow.get(account_id)
            if sender is None:
                raise AccountNotFoundError(account_id)
            recipient = await uow.get_by_username(recipient_username)
            if recipient is None:
                raise RecipientNotFoundError(recipient_username)
            if recipient.id == sender.id:
                raise SelfTransferError()

            # Lock both rows in ascending id order so opposite transfers cannot deadlock
            locked: dict[int, Account] = {}
            for acc_id in sorted((sender.id, recipient.id)):
                locked[acc_id] = await _load_for_update(uow, acc_id)
            sender, recipient = locked[sender.id], locked[recipient.id]

            _require_funds(sender, amount)
            sender = await uow.update(sender.id, balance=quantize(sender.balance - amount))
            recipient = await uow.update(recipient.id, balance=quantize(recipient.balance + amount))

            await uow.append(
                NewLedgerEntry(
                    account_id=sender.id,
                    kind=LedgerKind.TRANSFER_OUT,
                    amount=amount,
                    description=f"Transfer to {recipient.username}",
                    counterparty_username=recipient.username,
                    metadata=metadata,
                )
            )
            await uow.append(
                NewLedgerEntry(
                    account_id=recipient.id,
                    kind=LedgerKind.TRANSFER_IN,
                    amount=amount,
                    description=f"Transfer from {sender.username}",
                    counterparty_username=sender.username,
                    metadata=metadata,
                )
            )

        logger.info(
            "transfer from=%s to=%s amount=%s", sender.id, recipient.id, format_amount(amount)
        )
        return TransferResponse(
            new_balance=format_amount(sender.balance),
            amount=format_amount(amount),
            recipient=recipient.username,
            note=note,
        )

    # ------------------------------------------------------------------
    # Wheel of fortune
    # ------------------------------------------------------------------

    async def spin_wheel(self, account_id: int) -> SpinResponse:
        cost = c.WHEEL_SPIN_COST
        async with self._store.unit_of_work() as uow:
            account = await _load_for_update(uow, account_id)
            _require_funds(account, cost)

            drawn = self._rng.choice(c.WHEEL_OUTCOMES)
            after_cost = account.balance - cost
            applied = Decimal(drawn)
            if after_cost + applied < ZERO:
                # A loss never takes more than what is left after the entry cost
                applied = ZERO - after_cost  # not -after_cost: avoids Decimal('-0.00')
            applied = quantize(applied)
            account = await uow.update(account_id, balance=quantize(after_cost + applied))

            await uow.append(
                NewLedgerEntry(
                    account_id=account_id,
                    kind=LedgerKind.GAME,
                    amount=-cost,
                    description=f"{c.WHEEL_DESCRIPTION} - entry",
                )
            )
            if applied != ZERO:
                await uow.append(
                    NewLedgerEntry(
                        account_id=account_id,
                        kind=LedgerKind.GAME,
                        amount=applied,
                        description=f"{c.WHEEL_DESCRIPTION} - {'prize' if applied > 0 else 'loss'}",
                        metadata={"spinResult": drawn, "applied": format_amount(applied)},
                    )
                )

        if applied > 0:
            outcome, message = SpinOutcome.WIN, f"Congratulations! You won ${format_amount(applied)}"
        elif applied < 0:
            outcome, message = SpinOutcome.LOSE, f"You lost ${format_amount(-applied)}"
        else:
            outcome, message = SpinOutcome.NEUTRAL, "Better luck next time!"

        logger.info(
            "wheel account=%s drawn=%s applied=%s balance=%s",
            account_id, drawn, format_amount(applied), format_amount(account.balance),
        )
        return SpinResponse(
            result=drawn,
            outcome=outcome.value,
            cost=format_amount(cost),
            applied=format_amount(applied),
            new_balance=format_amount(account.balance),
            message=message,
        )
