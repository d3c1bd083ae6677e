import pytest

from billingengine.entities import Delinquency, Outstanding
from billingengine.errors import (
    BadRequestError,
    InternalServerError,
    NotFoundError,
    RpcError,
    StatusCode,
)
from billingengine.handlers import LoanHandler, PaymentHandler


class FakeLoanService:
    def __init__(self, error=None, outstanding=0.0, delinquent=False):
        self.error = error
        self.outstanding = outstanding
        self.delinquent = delinquent
        self.calls = []

    def _check(self, name, user_id):
        self.calls.append((name, user_id))
        if self.error is not None:
            raise self.error

    def create_loan(self, user_id):
        self._check("create_loan", user_id)

    def get_outstanding(self, user_id):
        self._check("get_outstanding", user_id)
        return Outstanding(outstanding=self.outstanding)

    def is_delinquent(self, user_id):
        self._check("is_delinquent", user_id)
        return Delinquency(is_delinquent=self.delinquent)


class FakePaymentService:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def make_payment(self, user_id):
        self.calls.append(user_id)
        if self.error is not None:
            raise self.error


def test_create_loan_passes_user_to_service():
    service = FakeLoanService()
    assert LoanHandler(service).create_loan("user1") is None
    assert service.calls == [("create_loan", "user1")]


def test_get_outstanding_returns_balance():
    service = FakeLoanService(outstanding=1100.0)
    assert LoanHandler(service).get_outstanding("user1") == 1100.0


def test_get_outstanding_is_single_precision():
    service = FakeLoanService(outstanding=16777217.0)
    assert LoanHandler(service).get_outstanding("user1") == 16777216.0


def test_is_delinquent_returns_flag():
    assert LoanHandler(FakeLoanService(delinquent=True)).is_delinquent("user1") is True
    assert LoanHandler(FakeLoanService(delinquent=False)).is_delinquent("user1") is False


@pytest.mark.parametrize(
    "error, code",
    [
        (BadRequestError("you already apply for loan"), StatusCode.INVALID_ARGUMENT),
        (NotFoundError("missing"), StatusCode.NOT_FOUND),
        (InternalServerError("db down"), StatusCode.INTERNAL),
        (RuntimeError("boom"), StatusCode.INTERNAL),
    ],
)
@pytest.mark.parametrize("method", ["create_loan", "get_outstanding", "is_delinquent"])
def test_loan_handler_translates_errors(error, code, method):
    handler = LoanHandler(FakeLoanService(error=error))
    with pytest.raises(RpcError) as info:
        getattr(handler, method)("user1")
    assert info.value.code is code
    assert info.value.message == str(error)


def test_make_payment_passes_user_to_service():
    service = FakePaymentService()
    assert PaymentHandler(service).make_payment("user1") is None
    assert service.calls == ["user1"]


def test_make_payment_bad_request_is_invalid_argument():
    error = BadRequestError("all loans have been paid off")
    with pytest.raises(RpcError) as info:
        PaymentHandler(FakePaymentService(error=error)).make_payment("user1")
    assert info.value.code is StatusCode.INVALID_ARGUMENT
    assert "all loans have been paid off" in info.value.message


def test_make_payment_internal_error_is_internal():
    error = InternalServerError("commit error")
    with pytest.raises(RpcError) as info:
        PaymentHandler(FakePaymentService(error=error)).make_payment("user1")
    assert info.value.code is StatusCode.INTERNAL
    assert info.value.message == str(error)