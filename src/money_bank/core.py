"""
core.py — Currency-tagged values and deferred money expressions

================================================================================
DESIGN PRINCIPLES
================================================================================

1. CLOSED CURRENCY SET
   Currency is an Enum. Every Money leaf carries a member of it, so an
   invalid currency can only enter through Currency.parse(), which fails
   with UnknownCurrency.

2. INTEGER AMOUNTS
   Amounts are int. Never float. Non-int amounts and multipliers raise
   TypeError.

3. DEFERRED ARITHMETIC
   Money + Money does NOT add. It builds a Sum node. Addition across
   currencies only becomes meaningful once a Bank supplies the rates,
   so the work is postponed until reduce().

4. IMMUTABILITY
   Money and Sum are frozen dataclasses. times(), + and reduce() always
   return new objects. A node can only be built from existing nodes, so
   trees are finite and acyclic.

================================================================================
EXPRESSION TREE
================================================================================

    Expression = Money | Sum

         Sum
        /   \\
      Sum    Money(10, CHF)        (5 USD + 3 USD) + 10 CHF
     /   \\
    5 USD  3 USD

Both variants expose the same operations:

    reduce(bank, to) -> Money     evaluate the tree in currency `to`
    times(k)         -> Expression scale every leaf by k
    plus(other), +   -> Sum        defer an addition
    to_dict()        -> dict       JSON-compatible form

================================================================================
PRECISION
================================================================================

Conversion divides by an integer rate and truncates toward zero:

    Money.franc(7).reduce(bank, USD)    # rate CHF->USD = 2  ->  3 USD
    Money.franc(-7).reduce(bank, USD)   # -> -3 USD (not -4)

This is the only place where precision is lost.

================================================================================
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterator, Union

from .errors import UnknownCurrency

if TYPE_CHECKING:
    from .bank import Bank


# ==============================================================================
# CURRENCY
# ==============================================================================

class Currency(Enum):
    """
    Supported currencies. The set is closed: nothing outside it can be
    constructed.
    """
    USD = ("USD", "US Dollar")
    CHF = ("CHF", "Swiss Franc")

    def __init__(self, code: str, display_name: str):
        self._code = code
        self._display_name = display_name

    @property
    def code(self) -> str:
        return self._code

    @property
    def display_name(self) -> str:
        return self._display_name

    @classmethod
    def dollar(cls) -> Currency:
        return cls.USD

    @classmethod
    def franc(cls) -> Currency:
        return cls.CHF

    @classmethod
    def codes(cls) -> tuple[str, ...]:
        return tuple(member.code for member in cls)

    @classmethod
    def parse(cls, code: str) -> Currency:
        """
        Currency from its ISO code ("usd", " CHF " are accepted).

        Raises:
            UnknownCurrency: if the code is not in the closed set
        """
        if not isinstance(code, str):
            raise UnknownCurrency(code, cls.codes())

        normalized = code.strip().upper()
        for member in cls:
            if member.code == normalized:
                return member
        raise UnknownCurrency(code, cls.codes())

    def __str__(self) -> str:
        return self._code


def _truncating_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero (// rounds toward -inf)."""
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ==============================================================================
# OPERATORS SHARED BY ALL EXPRESSIONS
# ==============================================================================

class _ExpressionOps:
    """
    Operator sugar common to Money and Sum.

    Subclasses provide times(); addition always defers to a new Sum.
    """
    __slots__ = ()

    def plus(self, other: Expression) -> Sum:
        if not is_expression(other):
            raise TypeError(
                f"Operation not allowed: {type(self).__name__} + {type(other).__name__}. "
                f"Only Money and Sum can be added."
            )
        return Sum(self, other)

    def __add__(self, other: Expression) -> Sum:
        if not is_expression(other):
            return NotImplemented
        return Sum(self, other)

    def __mul__(self, multiplier: int) -> Expression:
        if not _is_int(multiplier):
            return NotImplemented
        return self.times(multiplier)

    def __rmul__(self, multiplier: int) -> Expression:
        return self.__mul__(multiplier)


# ==============================================================================
# MONEY (leaf)
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Money(_ExpressionOps):
    """
    An integer amount in one currency. The only leaf of an expression tree.

    INVARIANTS:
    1. amount is always int (bool and float are rejected)
    2. currency is always a Currency member
    3. Money(5, USD) != Money(5, CHF)

    USAGE:
        five = Money.dollar(5)
        ten = Money.franc(10)
        total = bank.reduce(five + ten, Currency.USD)
    """
    amount: int
    currency: Currency

    def __post_init__(self) -> None:
        if not _is_int(self.amount):
            raise TypeError(
                f"Money amount must be int, not {type(self.amount).__name__}"
            )
        if not isinstance(self.currency, Currency):
            raise TypeError(
                f"Money currency must be a Currency, not {type(self.currency).__name__}. "
                f"Use Currency.parse() for codes."
            )

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def of(cls, amount: int, currency: Currency) -> Money:
        return cls(amount, currency)

    @classmethod
    def zero(cls, currency: Currency) -> Money:
        return cls(0, currency)

    @classmethod
    def dollar(cls, amount: int) -> Money:
        return cls(amount, Currency.USD)

    @classmethod
    def franc(cls, amount: int) -> Money:
        return cls(amount, Currency.CHF)

    # -------------------------------------------------------------------------
    # Expression operations
    # -------------------------------------------------------------------------

    def times(self, multiplier: int) -> Money:
        """
        Scale by an integer. Zero and negative multipliers are allowed.
        """
        if not _is_int(multiplier):
            raise TypeError(
                f"Money can only be multiplied by int, not {type(multiplier).__name__}"
            )
        return Money(self.amount * multiplier, self.currency)

    def reduce(self, bank: Bank, to: Currency) -> Money:
        """
        Convert into `to` using the bank's rate for (self.currency, to).

        The amount is divided by the rate, truncating toward zero.
        """
        rate = bank.conversion_rate(self.currency, to)
        return Money(_truncating_div(self.amount, rate), to)

    # -------------------------------------------------------------------------
    # Properties and output
    # -------------------------------------------------------------------------

    @property
    def currency_code(self) -> str:
        return self.currency.code

    def is_zero(self) -> bool:
        return self.amount == 0

    def __repr__(self) -> str:
        return f"{self.amount} {self.currency.code}"

    def __str__(self) -> str:
        return self.__repr__()

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Format: {"amount": int, "currency": str}."""
        return {"amount": self.amount, "currency": self.currency.code}

    @classmethod
    def from_dict(cls, data: dict) -> Money:
        """
        Inverse of to_dict().

        Raises:
            ValueError: if the payload is malformed
            UnknownCurrency: if the currency code is not supported
        """
        if not isinstance(data, dict) or set(data) != {"amount", "currency"}:
            raise ValueError(f"Malformed Money payload: {data!r}")
        if not _is_int(data["amount"]):
            raise ValueError(f"Money amount must be int, got {data['amount']!r}")
        return cls(data["amount"], Currency.parse(data["currency"]))


# ==============================================================================
# SUM (node)
# ==============================================================================

@dataclass(frozen=True, slots=True)
class Sum(_ExpressionOps):
    """
    Deferred addition of two expressions.

    Each side is an already-built expression, so a Sum can never contain
    itself. a + b + c nests to the left: Sum(Sum(a, b), c).

    Chains can be thousands of levels deep (sum() over a list builds one),
    so every walk over the tree uses an explicit stack, never recursion.
    """
    augend: Expression
    addend: Expression

    def __post_init__(self) -> None:
        for side in (self.augend, self.addend):
            if not is_expression(side):
                raise TypeError(
                    f"Sum operands must be Money or Sum, not {type(side).__name__}"
                )

    def times(self, multiplier: int) -> Sum:
        """(a + b) * k == a * k + b * k"""
        if not _is_int(multiplier):
            raise TypeError(
                f"Sum can only be multiplied by int, not {type(multiplier).__name__}"
            )
        return _fold(self, lambda leaf: leaf.times(multiplier), Sum)

    def reduce(self, bank: Bank, to: Currency) -> Money:
        """Reduce every leaf to `to` independently, then add the amounts."""
        return Money(sum(leaf.reduce(bank, to).amount for leaf in self.leaves()), to)

    def leaves(self) -> Iterator[Money]:
        """Money leaves, left to right."""
        stack: list[Expression] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Money):
                yield node
            else:
                stack.append(node.addend)
                stack.append(node.augend)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sum):
            return NotImplemented
        stack = [(self, other)]
        while stack:
            left, right = stack.pop()
            if left is right:
                continue
            if isinstance(left, Sum) and isinstance(right, Sum):
                stack.append((left.addend, right.addend))
                stack.append((left.augend, right.augend))
            elif left != right:
                return False
        return True

    def __hash__(self) -> int:
        # Equal trees have equal leaf sequences
        return hash(tuple(self.leaves()))

    def __repr__(self) -> str:
        return _fold(self, repr, lambda augend, addend: f"({augend} + {addend})")

    def to_dict(self) -> dict:
        """Format: {"augend": <expression>, "addend": <expression>}."""
        return _fold(
            self,
            lambda leaf: leaf.to_dict(),
            lambda augend, addend: {"augend": augend, "addend": addend},
        )

    @classmethod
    def from_dict(cls, data: dict) -> Sum:
        if not isinstance(data, dict) or "augend" not in data:
            raise ValueError(f"Malformed Sum payload: {data!r}")
        return expression_from_dict(data)


Expression = Union[Money, Sum]


def is_expression(value: Any) -> bool:
    return isinstance(value, (Money, Sum))


def _fold(expr: Expression, on_leaf: Callable[[Money], Any], on_sum: Callable[[Any, Any], Any]) -> Any:
    """
    Post-order fold: on_leaf for every Money, on_sum(augend, addend) for
    every Sum. Uses an explicit stack so depth is not limited by recursion.
    """
    results: list = []
    stack: list = [(expr, False)]
    while stack:
        node, children_done = stack.pop()
        if isinstance(node, Money):
            results.append(on_leaf(node))
        elif children_done:
            addend = results.pop()
            augend = results.pop()
            results.append(on_sum(augend, addend))
        else:
            stack.append((node, True))
            stack.append((node.addend, False))
            stack.append((node.augend, False))
    return results[0]


def expression_from_dict(data: dict) -> Expression:
    """
    Rebuild an expression from Money.to_dict() / Sum.to_dict() output.

    Raises:
        ValueError: if the payload is neither a Money nor a Sum
        UnknownCurrency: if a leaf has an unsupported currency code
    """
    results: list = []
    stack: list = [(data, False)]
    while stack:
        node, children_done = stack.pop()
        if children_done:
            addend = results.pop()
            augend = results.pop()
            results.append(Sum(augend, addend))
        elif isinstance(node, dict) and "augend" in node:
            if set(node) != {"augend", "addend"}:
                raise ValueError(f"Malformed Sum payload with keys {sorted(node)}")
            stack.append((node, True))
            stack.append((node["addend"], False))
            stack.append((node["augend"], False))
        else:
            results.append(Money.from_dict(node))
    return results[0]
