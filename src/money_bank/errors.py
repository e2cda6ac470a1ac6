"""
errors.py — Error taxonomy for money_bank

Every error raised by the library derives from MoneyError, and also from the
closest built-in exception so generic handlers keep working:

    MoneyError
    ├── UnknownCurrency   (ValueError)   parse of a code outside the closed set
    ├── InvalidRate       (ValueError)   add_rate() with a rate the bank refuses
    └── MissingRate       (LookupError)  strict reduction across an unregistered pair

Type misuse (float amounts, Money + int, ...) raises plain TypeError.
"""

from __future__ import annotations
from typing import Any


class MoneyError(Exception):
    """Base class for every money_bank error."""


class UnknownCurrency(MoneyError, ValueError):
    """The given code does not name a supported currency."""

    def __init__(self, code: Any, known: tuple[str, ...] = ()):
        self.code = code
        message = f"Unknown currency code: {code!r}"
        if known:
            message += f". Supported codes: {', '.join(known)}"
        super().__init__(message)


class InvalidRate(MoneyError, ValueError):
    """The bank refuses to register this exchange rate."""

    def __init__(self, source: Any, target: Any, rate: int, reason: str):
        self.source = source
        self.target = target
        self.rate = rate
        super().__init__(f"Invalid rate {source}->{target} = {rate}: {reason}")


class MissingRate(MoneyError, LookupError):
    """No rate is registered for a cross-currency pair (strict banks only)."""

    def __init__(self, source: Any, target: Any):
        self.source = source
        self.target = target
        super().__init__(
            f"No exchange rate registered for {source}->{target}. "
            f"Register it with Bank.add_rate({source}, {target}, rate)."
        )
