"""Loan billing engine: repayment schedules, outstanding balances and delinquency."""

__version__ = "0.1.0"