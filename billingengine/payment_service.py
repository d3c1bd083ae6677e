"""Recording weekly payments against a user's active loan."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from billingengine.config import Config
from billingengine.entities import Payment
from billingengine.errors import BadRequestError, InternalServerError
from billingengine.loan_service import _get_active_loan, _transaction
from billingengine.repositories import LoanRepository, PaymentRepository, UnitOfWork


def get_eligible_payment(payments: Sequence[Payment], now: datetime) -> Optional[Payment]:
    """Return the first unpaid payment whose period has started, if any."""
    return next(
        (p for p in payments if now > p.start_at and p.paid_at is None),
        None,
    )


def is_last_payment(payments: Sequence[Payment], payment_id: str) -> bool:
    """Tell whether the payment is the final one of the schedule."""
    return payments[-1].id == payment_id


class PaymentService:
    """Marks instalments as paid and closes loans that are paid off."""

    def __init__(
        self,
        config: Config,
        payment_repo: PaymentRepository,
        loan_repo: LoanRepository,
        uow: UnitOfWork,
    ) -> None:
        self.config = config
        self._payment_repo = payment_repo
        self._loan_repo = loan_repo
        self._uow = uow

    def make_payment(self, user_id: str) -> None:
        """Pay the next eligible instalment of the user's active loan."""
        loan = _get_active_loan(self._loan_repo, user_id)
        now = datetime.now()

        try:
            payments = self._payment_repo.get_payments_by_loan_id(loan.id)
        except Exception as exc:
            raise InternalServerError(str(exc)) from exc

        payment = get_eligible_payment(payments, now)
        if payment is None:
            raise BadRequestError("all loans have been paid off")
        last = is_last_payment(payments, payment.id)

        with _transaction(self._uow) as tx:
            loan_repo = self._uow.loan_repository(tx)
            payment_repo = self._uow.payment_repository(tx)
            payment_repo.update_paid_at_payment(payment.id, now)
            if last:
                loan_repo.update_is_active_loan_by_id(loan.id, False)