#!/usr/bin/env python3
"""
reduction_demo.py — Mixed-currency arithmetic with money_bank

================================================================================
THE PROBLEM
================================================================================

    $5 + 10 CHF = ?

There is no answer until somebody says how many francs buy a dollar.
Adding the raw numbers (15) is wrong, and converting eagerly forces every
intermediate result into one currency before the caller has picked it.

================================================================================
THE APPROACH
================================================================================

    total = Money.dollar(5) + Money.franc(10)   # a Sum, nothing converted
    bank.add_rate(Currency.CHF, Currency.USD, 2)
    bank.reduce(total, Currency.USD)            # 10 USD

Arithmetic builds an expression tree. The Bank evaluates it once, at the
end, in the currency the caller asks for.

================================================================================
"""

import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from money_bank import (
    Bank,
    Currency,
    Money,
    MissingRate,
    STRICT,
    UnknownCurrency,
    expression_from_dict,
)


def demonstrate_deferred_addition():
    """Addition builds a tree instead of a number."""
    print("=" * 60)
    print("DEFERRED ADDITION")
    print("=" * 60)
    print()

    total = Money.dollar(5) + Money.franc(10)
    print(">>> Money.dollar(5) + Money.franc(10)")
    print(f"{total!r}")
    print()

    scaled = total.times(2)
    print(">>> _.times(2)")
    print(f"{scaled!r}")
    print()


def demonstrate_reduction():
    """Reduce the reference scenarios."""
    print("=" * 60)
    print("REDUCTION")
    print("=" * 60)
    print()

    bank = Bank()
    bank.add_rate(Currency.CHF, Currency.USD, 2)
    print(f"Bank: {bank}  (CHF->USD = {bank.rate(Currency.CHF, Currency.USD)})")
    print()

    scenarios = [
        ("$5 + $5", Money.dollar(5) + Money.dollar(5)),
        ("2 CHF", Money.franc(2)),
        ("$5 + 10 CHF", Money.dollar(5) + Money.franc(10)),
        ("($5 + 10 CHF) * 2", (Money.dollar(5) + Money.franc(10)).times(2)),
        ("-7 CHF", Money.franc(-7)),
    ]
    for label, expr in scenarios:
        print(f"  {label:<20} -> {bank.reduce(expr, Currency.USD)}")
    print()
    print("Note: -7 CHF / 2 truncates toward zero (-3 USD, not -4).")
    print()


def demonstrate_policies():
    """Lenient vs strict handling of missing rates."""
    print("=" * 60)
    print("MISSING RATES")
    print("=" * 60)
    print()

    print(">>> Bank().reduce(Money.franc(10), Currency.USD)")
    print(f"{Bank().reduce(Money.franc(10), Currency.USD)}   (rate 1, see warning above)")
    print()

    print(">>> Bank(STRICT).reduce(Money.franc(10), Currency.USD)")
    try:
        Bank(STRICT).reduce(Money.franc(10), Currency.USD)
    except MissingRate as e:
        print(f"MissingRate: {e}")
    print()

    print('>>> Currency.parse("EUR")')
    try:
        Currency.parse("EUR")
    except UnknownCurrency as e:
        print(f"UnknownCurrency: {e}")
    print()


def demonstrate_serialization():
    """Expressions and rate tables as plain dicts."""
    print("=" * 60)
    print("SERIALIZATION")
    print("=" * 60)
    print()

    expr = Money.dollar(5) + Money.franc(10)
    data = expr.to_dict()
    print(f"Expression: {data}")
    print(f"Restored equal: {expression_from_dict(data) == expr}")
    print()

    bank = Bank()
    bank.add_rate(Currency.CHF, Currency.USD, 2)
    print(f"Bank: {bank.to_dict()}")
    print()


def main():
    """Run all demonstrations."""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    demonstrate_deferred_addition()
    demonstrate_reduction()
    demonstrate_policies()
    demonstrate_serialization()


if __name__ == "__main__":
    main()
