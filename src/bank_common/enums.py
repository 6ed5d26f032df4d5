"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class LedgerKind(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"
    SERVICE = "service"
    MOBILE_RECHARGE = "mobile_recharge"
    GAME = "game"


# Kinds whose stored amount is an unsigned magnitude of a debit.
DEBIT_KINDS = frozenset({
    LedgerKind.WITHDRAW,
    LedgerKind.TRANSFER_OUT,
    LedgerKind.SERVICE,
    LedgerKind.MOBILE_RECHARGE,
})


class MobileOperator(str, Enum):
    MOVISTAR = "movistar"
    CLARO = "claro"
    TIGO = "tigo"
    VIRGIN = "virgin"


class SpinOutcome(str, Enum):
    WIN = "win"
    LOSE = "lose"
    NEUTRAL = "neutral"
