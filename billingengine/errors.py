"""Error kinds raised by the services and their mapping to RPC status codes."""

from __future__ import annotations

from enum import IntEnum


class BillingError(Exception):
    """Base of the errors the billing services raise."""

    base_message = "billing error"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        message = f"{self.base_message}: {detail}" if detail else self.base_message
        super().__init__(message)


class NotFoundError(BillingError):
    base_message = "Not Found"


class InternalServerError(BillingError):
    base_message = "Internal server error"


class BadRequestError(BillingError):
    base_message = "Bad request error"


class StatusCode(IntEnum):
    """RPC status codes."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @property
    def label(self) -> str:
        """The code's name as it appears in status messages."""
        if self is StatusCode.CANCELLED:
            return "Canceled"
        if self is StatusCode.OK:
            return "OK"
        return "".join(part.capitalize() for part in self.name.split("_"))


class RpcError(Exception):
    """An error carrying an RPC status code."""

    def __init__(self, code: StatusCode, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(code, message)

    def __str__(self) -> str:
        return f"rpc error: code = {self.code.label} desc = {self.message}"


def to_rpc_error(err: BaseException) -> RpcError:
    """Translate any error into an RpcError with the matching status code."""
    if isinstance(err, NotFoundError):
        code = StatusCode.NOT_FOUND
    elif isinstance(err, BadRequestError):
        code = StatusCode.INVALID_ARGUMENT
    else:
        code = StatusCode.INTERNAL
    return RpcError(code, str(err))