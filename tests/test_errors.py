import pytest

from billingengine.errors import (
    BadRequestError,
    BillingError,
    InternalServerError,
    NotFoundError,
    RpcError,
    StatusCode,
    to_rpc_error,
)


def test_message_without_detail_is_base_message():
    assert str(BadRequestError()) == "Bad request error"
    assert str(NotFoundError()) == "Not Found"
    assert str(InternalServerError()) == "Internal server error"


def test_message_with_detail():
    err = BadRequestError("you already apply for loan")
    assert str(err) == "Bad request error: you already apply for loan"
    assert err.detail == "you already apply for loan"


@pytest.mark.parametrize(
    "cls, base",
    [
        (NotFoundError, "Not Found"),
        (InternalServerError, "Internal server error"),
        (BadRequestError, "Bad request error"),
    ],
)
def test_kinds_share_base(cls, base):
    err = cls("x")
    assert isinstance(err, BillingError)
    assert err.detail == "x"
    assert str(err) == f"{base}: x"


@pytest.mark.parametrize(
    "err, code",
    [
        (NotFoundError("missing"), StatusCode.NOT_FOUND),
        (BadRequestError("bad"), StatusCode.INVALID_ARGUMENT),
        (InternalServerError("boom"), StatusCode.INTERNAL),
        (RuntimeError("other"), StatusCode.INTERNAL),
    ],
)
def test_to_rpc_error_code(err, code):
    rpc = to_rpc_error(err)
    assert rpc.code is code
    assert rpc.message == str(err)


def test_rpc_error_string():
    rpc = to_rpc_error(BadRequestError("Active loan not found"))
    assert str(rpc) == (
        "rpc error: code = InvalidArgument desc = Bad request error: Active loan not found"
    )


@pytest.mark.parametrize(
    "err, label, number",
    [
        (NotFoundError(), "NotFound", 5),
        (InternalServerError(), "Internal", 13),
        (BadRequestError(), "InvalidArgument", 3),
    ],
)
def test_status_labels(err, label, number):
    rpc = to_rpc_error(err)
    assert rpc.code.label == label
    assert int(rpc.code) == number


def test_rpc_error_is_raisable():
    rpc = to_rpc_error(NotFoundError())
    with pytest.raises(RpcError) as info:
        raise rpc
    assert info.value is rpc
    assert info.value.code is StatusCode.NOT_FOUND
    assert info.value.message == "Not Found"