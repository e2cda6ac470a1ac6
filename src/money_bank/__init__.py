"""
money_bank — Multi-currency money expressions

Build sums of amounts in different currencies, scale them, and let a Bank
reduce the whole expression to one amount in the currency you ask for.

================================================================================
QUICK START
================================================================================

Basic usage:

    from money_bank import Bank, Currency, Money

    bank = Bank()
    bank.add_rate(Currency.CHF, Currency.USD, 2)

    # Nothing is converted yet: this is a Sum
    total = Money.dollar(5) + Money.franc(10)

    bank.reduce(total, Currency.USD)            # 10 USD  (5 + 10 / 2)
    bank.reduce(total.times(2), Currency.USD)   # 20 USD

Strict rates:

    from money_bank import Bank, Currency, Money, STRICT, MissingRate

    bank = Bank(STRICT)
    bank.reduce(Money.franc(10), Currency.USD)  # raises MissingRate

Parsing codes:

    Currency.parse("chf")      # Currency.CHF
    Currency.parse("EUR")      # raises UnknownCurrency

================================================================================
"""

# Values and expressions
from .core import (
    Currency,
    Money,
    Sum,
    Expression,
    is_expression,
    expression_from_dict,
)

# Rates and reduction
from .bank import (
    Bank,
    RatePolicy,
    LENIENT,
    STRICT,
)

# Errors
from .errors import (
    MoneyError,
    UnknownCurrency,
    InvalidRate,
    MissingRate,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Core
    "Currency",
    "Money",
    "Sum",
    "Expression",
    "is_expression",
    "expression_from_dict",
    # Bank
    "Bank",
    "RatePolicy",
    "LENIENT",
    "STRICT",
    # Errors
    "MoneyError",
    "UnknownCurrency",
    "InvalidRate",
    "MissingRate",
]
