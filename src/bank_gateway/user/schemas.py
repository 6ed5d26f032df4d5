"""Pydantic request schemas for auth and security endpoints.

Responses reuse AccountSummary from bank_account; credentials and internal
counters are never serialized. PIN confirmation is compared by UserService
so a mismatch is reported against ``confirmPin``.
"""

from pydantic import Field

from src.bank_common.schemas import CamelModel

_PIN_PATTERN = r"^\d{4}$"


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=64)
    pin: str = Field(..., pattern=_PIN_PATTERN)
    confirm_pin: str


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    pin: str = Field(..., pattern=_PIN_PATTERN)


class ChangePinRequest(CamelModel):
    current_pin: str = Field(..., pattern=_PIN_PATTERN)
    new_pin: str = Field(..., pattern=_PIN_PATTERN)
    confirm_pin: str
