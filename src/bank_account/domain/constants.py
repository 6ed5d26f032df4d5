"""Business constants for balance operations. All amounts in dollars (Decimal)."""

from decimal import Decimal

# Registration: whole-dollar opening balance in [100, 999]
INITIAL_BALANCE_MIN = 100
INITIAL_BALANCE_MAX = 999

WITHDRAW_MIN = Decimal("10.00")
WITHDRAW_MAX = Decimal("5000.00")

DEPOSIT_MIN = Decimal("10.00")
DEPOSIT_MAX = Decimal("10000.00")

TRANSFER_MIN = Decimal("1.00")
TRANSFER_MAX = Decimal("10000.00")
TRANSFER_NOTE_MAX_LENGTH = 200

RECHARGE_MIN = Decimal("5.00")
RECHARGE_MAX = Decimal("100.00")
PHONE_MIN_LENGTH = 10
PHONE_MAX_LENGTH = 15

# service id -> (display name, monthly price)
STREAMING_CATALOG: dict[str, tuple[str, Decimal]] = {
    "netflix": ("Netflix", Decimal("15.99")),
    "spotify": ("Spotify Premium", Decimal("9.99")),
    "disney": ("Disney+", Decimal("7.99")),
    "prime": ("Prime Video", Decimal("8.99")),
}

WHEEL_SPIN_COST = Decimal("10.00")
WHEEL_OUTCOMES: tuple[int, ...] = (50, -25, 100, -10, 25, -5, 75, -15, 30, -20)
WHEEL_DESCRIPTION = "Wheel of Fortune"
