"""Storage of loans and payments, and transaction handling."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict
from datetime import datetime
from typing import Iterable, Iterator, Union

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    MetaData,
    String,
    Table,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Connection, Engine

from billingengine.entities import Loan, Payment

Bind = Union[Engine, Connection]

metadata = MetaData()

loans_table = Table(
    "loans",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String, nullable=False, index=True),
    Column("amount", Float, nullable=False),
    Column("interest", Float, nullable=False),
    Column("is_active", Boolean, nullable=False),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
    Column("deleted_at", DateTime),
    Column("created_by", String),
    Column("updated_by", String),
    Column("deleted_by", String),
)

payments_table = Table(
    "payments",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("loan_id", String(36), nullable=False, index=True),
    Column("amount", Float, nullable=False),
    Column("start_at", DateTime),
    Column("end_at", DateTime),
    Column("paid_at", DateTime),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
    Column("deleted_at", DateTime),
    Column("created_by", BigInteger),
    Column("updated_by", BigInteger),
    Column("deleted_by", BigInteger),
)


def create_schema(engine: Engine) -> None:
    """Create the loans and payments tables if they do not exist."""
    metadata.create_all(engine)


def _stamp(record: Loan | Payment, now: datetime) -> None:
    if record.created_at is None:
        record.created_at = now
    if record.updated_at is None:
        record.updated_at = now


class _Repository:
    def __init__(self, bind: Bind) -> None:
        self._bind = bind

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        if isinstance(self._bind, Engine):
            with self._bind.begin() as conn:
                yield conn
        else:
            yield self._bind


class LoanRepository(_Repository):
    """Reads and writes loans through an engine or an open transaction."""

    def create_loan(self, loan: Loan) -> None:
        """Insert a loan, filling in its timestamps when they are unset."""
        _stamp(loan, datetime.now())
        with self._connection() as conn:
            conn.execute(insert(loans_table).values(**asdict(loan)))

    def get_active_loans_by_user_id(self, user_id: str) -> list[Loan]:
        """Return the user's active loans."""
        query = select(loans_table).where(
            loans_table.c.user_id == user_id,
            loans_table.c.is_active.is_(True),
        )
        with self._connection() as conn:
            return [Loan(**row._mapping) for row in conn.execute(query)]

    def update_is_active_loan_by_id(self, loan_id: str, is_active: bool) -> None:
        """Set whether a loan is active."""
        statement = (
            update(loans_table)
            .where(loans_table.c.id == loan_id)
            .values(is_active=is_active, updated_at=datetime.now())
        )
        with self._connection() as conn:
            conn.execute(statement)


class PaymentRepository(_Repository):
    """Reads and writes payments through an engine or an open transaction."""

    def create_payments(self, payments: Iterable[Payment]) -> None:
        """Insert payments in one statement; an empty batch is an error."""
        batch = list(payments)
        if not batch:
            raise ValueError("no payments to create")
        now = datetime.now()
        for payment in batch:
            _stamp(payment, now)
        with self._connection() as conn:
            conn.execute(insert(payments_table), [asdict(p) for p in batch])

    def update_paid_at_payment(
        self, payment_id: str, paid_at: datetime | None
    ) -> None:
        """Record when a payment was paid."""
        statement = (
            update(payments_table)
            .where(payments_table.c.id == payment_id)
            .values(paid_at=paid_at, updated_at=datetime.now())
        )
        with self._connection() as conn:
            conn.execute(statement)

    def get_payments_by_loan_id(self, loan_id: str) -> list[Payment]:
        """Return a loan's payments, earliest start first."""
        query = (
            select(payments_table)
            .where(payments_table.c.loan_id == loan_id)
            .order_by(payments_table.c.start_at.asc())
        )
        with self._connection() as conn:
            return [Payment(**row._mapping) for row in conn.execute(query)]


class UnitOfWork:
    """Opens transactions and hands out repositories bound to them."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def begin(self) -> Connection:
        """Open a connection with a transaction in progress."""
        conn = self._engine.connect()
        try:
            conn.begin()
        except BaseException:
            conn.close()
            raise
        return conn

    def commit(self, tx: Connection) -> None:
        """Commit the transaction and release its connection."""
        try:
            tx.commit()
        finally:
            tx.close()

    def rollback(self, tx: Connection) -> None:
        """Roll back the transaction and release its connection."""
        try:
            tx.rollback()
        finally:
            tx.close()

    def loan_repository(self, tx: Connection) -> LoanRepository:
        return LoanRepository(tx)

    def payment_repository(self, tx: Connection) -> PaymentRepository:
        return PaymentRepository(tx)