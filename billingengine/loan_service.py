"""Loan creation, outstanding balance and delinquency checks."""

from __future__ import annotations

import uuid
from contextlib import contextmanager, suppress
from datetime import datetime, timedelta
from typing import Any, Iterator, Sequence

from billingengine.entities import (
    LOAN_AMOUNT,
    LOAN_INTEREST_RATE,
    PAYMENT_WEEKS,
    Delinquency,
    Loan,
    Outstanding,
    Payment,
)
from billingengine.errors import BadRequestError, InternalServerError
from billingengine.repositories import LoanRepository, PaymentRepository, UnitOfWork

_WEEK = timedelta(days=7)
_GRACE_PERIOD = timedelta(days=14)
_TICK = timedelta(microseconds=1)


def _get_active_loan(loan_repo: LoanRepository, user_id: str) -> Loan:
    """Return the user's first active loan or raise BadRequestError."""
    try:
        loans = loan_repo.get_active_loans_by_user_id(user_id)
    except Exception as exc:
        raise InternalServerError(str(exc)) from exc
    if not loans:
        raise BadRequestError("Active loan not found")
    return loans[0]


@contextmanager
def _transaction(uow: UnitOfWork) -> Iterator[Any]:
    """Run a block in a transaction; failures roll back and become InternalServerError."""
    try:
        tx = uow.begin()
    except Exception as exc:
        raise InternalServerError(str(exc)) from exc
    try:
        yield tx
    except Exception as exc:
        with suppress(Exception):
            uow.rollback(tx)
        raise InternalServerError(str(exc)) from exc
    try:
        uow.commit(tx)
    except Exception as exc:
        raise InternalServerError(str(exc)) from exc


def generate_payments(loan_id: str, now: datetime) -> list[Payment]:
    """Build the weekly instalment schedule of a new loan starting at ``now``."""
    amount = LOAN_AMOUNT / PAYMENT_WEEKS + (LOAN_AMOUNT * LOAN_INTEREST_RATE) / PAYMENT_WEEKS
    payments = []
    for week in range(PAYMENT_WEEKS):
        start_at = now + week * _WEEK
        payments.append(
            Payment(
                id=str(uuid.uuid1()),
                loan_id=loan_id,
                amount=amount,
                start_at=start_at,
                end_at=start_at + _WEEK - _TICK,
                paid_at=None,
            )
        )
    return payments


def compare_delinquent(payments: Sequence[Payment], now: datetime) -> bool:
    """Tell whether the instalment after the first paid one is over two weeks overdue."""
    if not payments:
        raise ValueError("no payments to check")
    paid_index = next(
        (index for index, payment in enumerate(payments) if payment.paid_at is not None),
        0,
    )
    check_index = paid_index + 1 if len(payments) - 1 > paid_index + 1 else paid_index
    due_date = payments[check_index].end_at + _GRACE_PERIOD
    return now > due_date


class LoanService:
    """Creates loans and reports on a user's active loan."""

    def __init__(
        self,
        uow: UnitOfWork,
        loan_repo: LoanRepository,
        payment_repo: PaymentRepository,
    ) -> None:
        self._uow = uow
        self._loan_repo = loan_repo
        self._payment_repo = payment_repo

    def create_loan(self, user_id: str) -> None:
        """Open a loan with its payment schedule; a user may hold one at a time."""
        try:
            loans = self._loan_repo.get_active_loans_by_user_id(user_id)
        except Exception as exc:
            raise InternalServerError(str(exc)) from exc
        if loans:
            raise BadRequestError("you already apply for loan")

        with _transaction(self._uow) as tx:
            loan_repo = self._uow.loan_repository(tx)
            payment_repo = self._uow.payment_repository(tx)
            now = datetime.now()
            loan_id = str(uuid.uuid1())
            loan_repo.create_loan(
                Loan(
                    id=loan_id,
                    user_id=user_id,
                    amount=LOAN_AMOUNT,
                    interest=LOAN_AMOUNT * LOAN_INTEREST_RATE,
                    is_active=True,
                    created_at=now,
                )
            )
            payment_repo.create_payments(generate_payments(loan_id, now))

    def _payments_of(self, loan: Loan) -> list[Payment]:
        try:
            return self._payment_repo.get_payments_by_loan_id(loan.id)
        except Exception as exc:
            raise InternalServerError(str(exc)) from exc

    def get_outstanding(self, user_id: str) -> Outstanding:
        """Return principal plus interest less what has been paid."""
        loan = _get_active_loan(self._loan_repo, user_id)
        payments = self._payments_of(loan)
        paid = sum(p.amount for p in payments if p.paid_at is not None)
        return Outstanding(outstanding=loan.amount + loan.interest - paid)

    def is_delinquent(self, user_id: str) -> Delinquency:
        """Report whether the user's active loan is overdue."""
        loan = _get_active_loan(self._loan_repo, user_id)
        payments = self._payments_of(loan)
        return Delinquency(is_delinquent=compare_delinquent(payments, datetime.now()))