"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/Session
  2xxx: Account/Balance
  9xxx: Validation/System
"""

from typing import Any


class AppError(Exception):
    """Base application error.

    ``data`` carries structured extras for the client (remaining login
    attempts, offending field) and ends up in the response envelope.
    """

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
        data: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        self.data = data
        super().__init__(message)


# --- 1xxx: Auth/Session ---

class UsernameExistsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Username already exists", 409)


class InvalidCredentialsError(AppError):
    def __init__(self, attempts_remaining: int | None = None) -> None:
        data = None
        if attempts_remaining is not None:
            data = {"attemptsRemaining": attempts_remaining}
        super().__init__(1003, "Invalid username or PIN", 401, data)
        self.attempts_remaining = attempts_remaining


class AccountLockedError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Account is locked. Contact the bank.", 423)


class NotAuthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Not authenticated", 401)


class WrongPinError(AppError):
    def __init__(self) -> None:
        super().__init__(1006, "Current PIN is incorrect", 401)


class AdminTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1007, "Admin token required", 403)


# --- 2xxx: Account/Balance ---

class InsufficientFundsError(AppError):
    def __init__(self, required: str, available: str) -> None:
        super().__init__(
            2001,
            f"Insufficient funds: required {required}, available {available}",
            400,
        )


class AccountNotFoundError(AppError):
    def __init__(self, account_id: int | str) -> None:
        super().__init__(2002, f"Account not found: {account_id}", 404)


class RecipientNotFoundError(AppError):
    def __init__(self, username: str) -> None:
        super().__init__(2003, f"Recipient not found: {username}", 404)


class SelfTransferError(AppError):
    def __init__(self) -> None:
        super().__init__(2004, "Cannot transfer to your own account", 400)


# --- 9xxx: Validation/System ---

class ValidationError(AppError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(9000, message, 400, {"field": field})
        self.field = field


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
