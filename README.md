# billingengine

A small loan billing engine. It gives each user a fixed-size loan with a
weekly repayment schedule. It records repayments, reports the balance still
owed and tells whether a borrower has fallen behind. Loans and payments are
stored through SQLAlchemy.

## How loans work

- Every loan is for **5,000,000**, with a flat **10 %** interest charge
  (500,000).
- The total of 5,500,000 is repaid over **50 weekly instalments** of
  110,000 each.
- The first instalment's window opens when the loan is created. Each later
  window opens seven days after the previous one. A window ends one
  microsecond before the next one opens.
- A user may hold only one active loan at a time. Applying again while a
  loan is active raises `BadRequestError`.
- A payment settles the earliest instalment whose window has already opened
  and which is still unpaid. Paying the final instalment of the schedule
  marks the loan inactive.
- The **outstanding** amount is the principal plus interest, less every
  instalment already paid.
- **Delinquency** is checked on one instalment. Take the first paid
  instalment, or the first instalment if none is paid. The one checked is
  the instalment right after it, unless that would be the last instalment;
  then it is the taken instalment itself. The borrower is delinquent when
  the current time is more than 14 days past the end of the checked
  instalment's window.

## Configuration

`billingengine.config.Config` is a frozen dataclass of service settings.
`Config.from_env(environ)` reads them from a mapping, or from `os.environ`
when no mapping is given. A variable that is missing keeps its default. An
integer variable that cannot be parsed raises `ValueError`.

| Variable                             | Field                               | Default     |
|--------------------------------------|-------------------------------------|-------------|
| `GRPC_PORT`                          | `grpc_port`                         | `9090`      |
| `REST_PORT`                          | `rest_port`                         | `80`        |
| `POSTGRES_HOST`                      | `postgres_host`                     | `localhost` |
| `POSTGRES_USERNAME`                  | `postgres_username`                 | `5432`      |
| `POSTGRES_PASSWORD`                  | `postgres_password`                 | `password`  |
| `POSTGRES_DATABASE`                  | `postgres_database`                 | `admin`     |
| `POSTGRES_PORT`                      | `postgres_port`                     | `postgres`  |
| `POSTGRES_SSLMODE`                   | `postgres_sslmode`                  | `disable`   |
| `POSTGRES_TIMEZONE`                  | `postgres_timezone`                 | `100`       |
| `POSTGRES_MAX_CONNECTIONS`           | `postgres_max_connections`          | `100`       |
| `POSTGRES_MAX_IDLE_CONNECTIONS`      | `postgres_max_idle_connections`     | `10`        |
| `POSTGRES_CONNECTIONS_MAX_IDLE_TIME` | `postgres_connection_max_idle_time` | `3600`      |

`config.dsn()` returns a libpq-style connection string of the form
`host=... user=... password=... dbname=... port=... sslmode=... TimeZone=...`.

## Wiring it together

```python
import os

from billingengine.app import build_application, init_db
from billingengine.config import Config
from billingengine.repositories import create_schema

config = Config.from_env(os.environ)
engine = init_db(
    "sqlite:///billing.db",
    config.postgres_max_connections,
    config.postgres_max_idle_connections,
    config.postgres_connection_max_idle_time,
)
create_schema(engine)

app = build_application(config, engine)
app.loan_handler.create_loan("user-1")
print(app.loan_handler.get_outstanding("user-1"))  # 5500000.0
```

`init_db(url, max_connections, max_idle_connections, connection_max_idle_time)`
takes an SQLAlchemy database URL. It creates an engine with statement
echoing turned on and a connection pool sized from the limits. A
non-positive connection limit means no limit. A non-positive idle time
means connections are never recycled. It then opens one connection to check
the database. If that fails, it raises `RuntimeError`. The driver for the
chosen database must be installed separately.

`create_schema(engine)` creates the `loans` and `payments` tables if they
do not exist.

`build_application(config, engine)` connects the repositories, the unit of
work, the services and the handlers. It returns an `Application`, a frozen
dataclass with the fields `config`, `engine`, `unit_of_work`,
`loan_service`, `payment_service`, `loan_handler` and `payment_handler`.

## Handlers

`billingengine.handlers` exposes the service operations as plain method
calls.

- `LoanHandler.create_loan(user_id)` opens a new loan and its 50-week
  schedule.
- `LoanHandler.get_outstanding(user_id)` returns the balance still owed on
  the active loan, rounded to single precision.
- `LoanHandler.is_delinquent(user_id)` returns whether the active loan is
  overdue.
- `PaymentHandler.make_payment(user_id)` pays the next eligible
  instalment.

Every handler method turns any exception into an `RpcError`.

## Errors

The services raise subclasses of `billingengine.errors.BillingError`:

- `BadRequestError` means the request cannot be met. For example, there is
  no active loan, a loan is already active, or no instalment is eligible
  for payment.
- `NotFoundError` means a record is missing.
- `InternalServerError` covers storage and transaction failures. When a
  transaction fails, it is rolled back first.

`to_rpc_error(err)` turns any exception into an `RpcError`, which carries a
`StatusCode` and a message:

- `BadRequestError` becomes `StatusCode.INVALID_ARGUMENT`.
- `NotFoundError` becomes `StatusCode.NOT_FOUND`.
- Anything else becomes `StatusCode.INTERNAL`.

`str()` of an `RpcError` reads `rpc error: code = InvalidArgument desc = ...`.

## Lower-level pieces

- `billingengine.entities` defines the `Loan` and `Payment` dataclasses and
  the results `Outstanding` and `Delinquency`. It also holds the constants
  `LOAN_AMOUNT`, `LOAN_INTEREST_RATE` and `PAYMENT_WEEKS`.
- `billingengine.repositories` holds the storage classes:
  - `LoanRepository` and `PaymentRepository` work on an engine or on an
    open connection. When no timestamp is set, they fill in `created_at`
    and `updated_at`. `PaymentRepository.create_payments` raises
    `ValueError` for an empty batch.
  - `UnitOfWork` opens a transaction with `begin()` and ends it with
    `commit(tx)` or `rollback(tx)`. It hands out repositories bound to that
    transaction.
- `billingengine.loan_service` holds the loan logic:
  - `LoanService` is the loan service itself.
  - `generate_payments(loan_id, now)` builds a repayment schedule.
  - `compare_delinquent(payments, now)` applies the overdue rule. It raises
    `ValueError` for an empty list.
- `billingengine.payment_service` holds the payment logic:
  - `PaymentService` is the payment service itself.
  - `get_eligible_payment(payments, now)` returns the instalment to pay
    next, or `None`.
  - `is_last_payment(payments, payment_id)` tells whether that instalment
    is the final one.

## What it does not do

The package has no network server and no command-line program. It does not
listen on `grpc_port` or `rest_port`; those settings are only carried in
`Config`. To serve the handlers over a network, call them from your own
server code.