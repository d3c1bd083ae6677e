"""RPC-facing handlers that turn service errors into status-coded errors."""

from __future__ import annotations

import struct

from billingengine.errors import to_rpc_error
from billingengine.loan_service import LoanService
from billingengine.payment_service import PaymentService


def _as_float32(value: float) -> float:
    """Round a value to single precision, as the wire message carries it."""
    return struct.unpack("<f", struct.pack("<f", value))[0]


class LoanHandler:
    """Serves loan requests on top of a LoanService."""

    def __init__(self, service: LoanService) -> None:
        self._service = service

    def create_loan(self, user_id: str) -> None:
        """Open a loan for the user."""
        try:
            self._service.create_loan(user_id)
        except Exception as exc:
            raise to_rpc_error(exc) from exc

    def get_outstanding(self, user_id: str) -> float:
        """Return the user's outstanding balance in single precision."""
        try:
            result = self._service.get_outstanding(user_id)
        except Exception as exc:
            raise to_rpc_error(exc) from exc
        return _as_float32(result.outstanding)

    def is_delinquent(self, user_id: str) -> bool:
        """Return whether the user's active loan is overdue."""
        try:
            result = self._service.is_delinquent(user_id)
        except Exception as exc:
            raise to_rpc_error(exc) from exc
        return result.is_delinquent


class PaymentHandler:
    """Serves payment requests on top of a PaymentService."""

    def __init__(self, service: PaymentService) -> None:
        self._service = service

    def make_payment(self, user_id: str) -> None:
        """Pay the user's next eligible instalment."""
        try:
            self._service.make_payment(user_id)
        except Exception as exc:
            raise to_rpc_error(exc) from exc