"""Database setup and wiring of repositories, services and handlers."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool

from billingengine.config import Config
from billingengine.handlers import LoanHandler, PaymentHandler
from billingengine.loan_service import LoanService
from billingengine.payment_service import PaymentService
from billingengine.repositories import LoanRepository, PaymentRepository, UnitOfWork


@dataclass(frozen=True)
class Application:
    """The assembled billing service."""

    config: Config
    engine: Engine
    unit_of_work: UnitOfWork
    loan_service: LoanService
    payment_service: PaymentService
    loan_handler: LoanHandler
    payment_handler: PaymentHandler


def init_db(
    url: str,
    max_connections: int,
    max_idle_connections: int,
    connection_max_idle_time: int,
) -> Engine:
    """Create an engine with the given pool limits and check that it connects.

    A non-positive connection limit means no limit; a non-positive idle time
    means connections are never recycled.
    """
    idle = max(1, max_idle_connections)
    if max_connections > 0:
        pool_size = min(idle, max_connections)
        max_overflow = max_connections - pool_size
    else:
        pool_size = idle
        max_overflow = -1
    recycle = connection_max_idle_time if connection_max_idle_time > 0 else -1

    engine = create_engine(
        url,
        echo=True,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=recycle,
    )
    try:
        with engine.connect():
            pass
    except Exception as exc:
        engine.dispose()
        raise RuntimeError(f"failed to connect to database: {exc}") from exc
    return engine


def build_application(config: Config, engine: Engine) -> Application:
    """Wire repositories, services and handlers around an engine."""
    unit_of_work = UnitOfWork(engine)
    loan_repository = LoanRepository(engine)
    payment_repository = PaymentRepository(engine)

    loan_service = LoanService(unit_of_work, loan_repository, payment_repository)
    payment_service = PaymentService(
        config, payment_repository, loan_repository, unit_of_work
    )

    return Application(
        config=config,
        engine=engine,
        unit_of_work=unit_of_work,
        loan_service=loan_service,
        payment_service=payment_service,
        loan_handler=LoanHandler(loan_service),
        payment_handler=PaymentHandler(payment_service),
    )