"""Unit tests for error classes and the response envelope."""

from src.bank_common.errors import (
    AccountLockedError,
    AccountNotFoundError,
    AdminTokenError,
    AppError,
    InsufficientFundsError,
    InternalError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    RecipientNotFoundError,
    SelfTransferError,
    UsernameExistsError,
    ValidationError,
    WrongPinError,
)
from src.bank_common.response import error_response, success_response


def test_app_error_base() -> None:
    err = AppError(9999, "test error", 418)
    assert err.code == 9999
    assert err.message == "test error"
    assert err.http_status == 418
    assert err.data is None
    assert str(err) == "test error"


def test_auth_errors() -> None:
    assert (UsernameExistsError().code, UsernameExistsError().http_status) == (1001, 409)
    assert (AccountLockedError().code, AccountLockedError().http_status) == (1004, 423)
    assert (NotAuthenticatedError().code, NotAuthenticatedError().http_status) == (1005, 401)
    assert (WrongPinError().code, WrongPinError().http_status) == (1006, 401)
    assert (AdminTokenError().code, AdminTokenError().http_status) == (1007, 403)


def test_invalid_credentials_reports_attempts() -> None:
    err = InvalidCredentialsError(attempts_remaining=2)
    assert err.code == 1003
    assert err.http_status == 401
    assert err.data == {"attemptsRemaining": 2}
    assert err.attempts_remaining == 2


def test_invalid_credentials_without_attempts() -> None:
    err = InvalidCredentialsError()
    assert err.data is None
    assert err.attempts_remaining is None


def test_balance_errors() -> None:
    err = InsufficientFundsError("50.00", "20.00")
    assert err.code == 2001
    assert err.http_status == 400
    assert "50.00" in err.message and "20.00" in err.message
    assert AccountNotFoundError(7).code == 2002
    assert AccountNotFoundError(7).http_status == 404
    assert RecipientNotFoundError("bob").code == 2003
    assert "bob" in RecipientNotFoundError("bob").message
    assert (SelfTransferError().code, SelfTransferError().http_status) == (2004, 400)


def test_validation_error_carries_field() -> None:
    err = ValidationError("amount", "Minimum amount is 10.00")
    assert err.code == 9000
    assert err.http_status == 400
    assert err.field == "amount"
    assert err.data == {"field": "amount"}


def test_internal_error() -> None:
    assert InternalError().code == 9002
    assert InternalError().http_status == 500


def test_success_response_envelope() -> None:
    resp = success_response({"balance": "10.00"})
    assert resp.code == 0
    assert resp.message == "success"
    assert resp.data == {"balance": "10.00"}
    assert resp.request_id.startswith("req_")
    assert resp.timestamp


def test_error_response_envelope() -> None:
    resp = error_response(2001, "Insufficient funds", {"field": "amount"})
    assert resp.code == 2001
    assert resp.data == {"field": "amount"}
