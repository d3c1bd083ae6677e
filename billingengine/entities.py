"""Loan and payment records and the results the services return."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

LOAN_AMOUNT = 5_000_000
LOAN_INTEREST_RATE = 0.10
PAYMENT_WEEKS = 50


@dataclass
class Loan:
    """A loan taken by a user."""

    id: str = ""
    user_id: str = ""
    amount: float = 0.0
    interest: float = 0.0
    is_active: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    created_by: str = ""
    updated_by: str = ""
    deleted_by: str = ""


@dataclass
class Payment:
    """One weekly instalment of a loan."""

    id: str = ""
    loan_id: str = ""
    amount: float = 0.0
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    deleted_by: Optional[int] = None


@dataclass(frozen=True)
class Outstanding:
    """The amount a user still owes."""

    outstanding: float


@dataclass(frozen=True)
class Delinquency:
    """Whether a user has fallen behind on payments."""

    is_delinquent: bool