"""
bank.py — Exchange rates and expression reduction

================================================================================
RATE TABLE
================================================================================

The Bank holds DIRECTIONAL integer rates keyed by (from, to):

    bank.add_rate(Currency.CHF, Currency.USD, 2)   # 2 CHF buy 1 USD
    bank.rate(Currency.CHF, Currency.USD)          # 2
    bank.rate(Currency.USD, Currency.CHF)          # 1  (reverse is NOT implied)

Reducing a Money divides its amount by the rate of (money.currency, target).

================================================================================
UNREGISTERED PAIRS
================================================================================

rate() never fails: an unregistered pair is worth 1. For from == to this is
the true identity. For two DIFFERENT currencies it silently treats them as
equal, which is rarely what the caller wants. RatePolicy decides what
reduction does in that case:

    LENIENT (default)   rate 1, logged as a WARNING
    STRICT              MissingRate is raised

Identity conversions (from == to) never need a registered rate.

================================================================================
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import logging

from .core import Currency, Expression, Money, is_expression
from .errors import InvalidRate, MissingRate

logger = logging.getLogger(__name__)


# ==============================================================================
# RATE POLICY
# ==============================================================================

@dataclass(frozen=True)
class RatePolicy:
    """
    Bank configuration.

    strict:
        Reducing across an unregistered cross-currency pair raises MissingRate
        instead of falling back to rate 1.
    allow_negative_rates:
        If False, add_rate() refuses negative rates with InvalidRate.
        A zero rate is always refused.
    """
    strict: bool = False
    allow_negative_rates: bool = True
    name: str = "default"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "strict": self.strict,
            "allow_negative_rates": self.allow_negative_rates,
        }


LENIENT = RatePolicy()
STRICT = RatePolicy(strict=True, allow_negative_rates=False, name="strict")


# ==============================================================================
# BANK
# ==============================================================================

class Bank:
    """
    Rate table plus the entry point for reduction.

    The rate table is the only mutable state in the library and changes only
    through add_rate(). A Bank is not synchronized: share it between threads
    only behind external locking.
    """

    def __init__(self, policy: Optional[RatePolicy] = None):
        self.policy = policy or LENIENT
        self._rates: Dict[Tuple[Currency, Currency], int] = {}

    # -------------------------------------------------------------------------
    # Rate table
    # -------------------------------------------------------------------------

    def add_rate(self, source: Currency, target: Currency, rate: int) -> None:
        """
        Register (or overwrite) the rate for the ordered pair source -> target.

        Raises:
            TypeError: if a currency is not a Currency or the rate is not int
            InvalidRate: if rate == 0, or rate < 0 and the policy forbids it
        """
        self._check_currency(source)
        self._check_currency(target)
        if not isinstance(rate, int) or isinstance(rate, bool):
            raise TypeError(f"Rate must be int, not {type(rate).__name__}")
        if rate == 0:
            raise InvalidRate(source, target, rate, "a zero rate would divide by zero")
        if rate < 0 and not self.policy.allow_negative_rates:
            raise InvalidRate(
                source, target, rate,
                f"negative rates are disabled by policy '{self.policy.name}'",
            )

        previous = self._rates.get((source, target))
        self._rates[(source, target)] = rate
        if previous is None:
            logger.debug(f"Bank added rate {source}->{target} = {rate}")
        else:
            logger.debug(f"Bank replaced rate {source}->{target}: {previous} -> {rate}")

    def rate(self, source: Currency, target: Currency) -> int:
        """Registered rate for source -> target, or 1 when none is registered."""
        return self._rates.get((source, target), 1)

    def has_rate(self, source: Currency, target: Currency) -> bool:
        return (source, target) in self._rates

    def conversion_rate(self, source: Currency, target: Currency) -> int:
        """
        Rate used when reducing a source amount into target.

        Same as rate(), except for unregistered cross-currency pairs, which
        the policy either rejects (MissingRate) or logs and treats as 1.
        """
        if (source, target) in self._rates:
            return self._rates[(source, target)]
        if source == target:
            return 1
        if self.policy.strict:
            raise MissingRate(source, target)
        logger.warning(
            f"No rate registered for {source}->{target}; "
            f"falling back to 1 (policy '{self.policy.name}')"
        )
        return 1

    @property
    def rates(self) -> Dict[Tuple[Currency, Currency], int]:
        """Copy of the rate table."""
        return dict(self._rates)

    # -------------------------------------------------------------------------
    # Reduction
    # -------------------------------------------------------------------------

    def reduce(self, source: Expression, to: Currency) -> Money:
        """Evaluate an expression into a single Money in currency `to`."""
        if not is_expression(source):
            raise TypeError(
                f"Bank can only reduce Money or Sum, not {type(source).__name__}"
            )
        self._check_currency(to)
        logger.debug(f"Bank reducing {type(source).__name__} to {to}")
        return source.reduce(self, to)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """
        Format: {"policy": {...}, "rates": [{"from": str, "to": str, "rate": int}, ...]}
        """
        return {
            "policy": self.policy.to_dict(),
            "rates": [
                {"from": source.code, "to": target.code, "rate": rate}
                for (source, target), rate in self._rates.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Bank:
        """
        Inverse of to_dict(). Every rate goes through add_rate(), so the
        restored bank enforces the same checks.

        Raises:
            ValueError: if the payload is malformed
            UnknownCurrency: if a code is not supported
            InvalidRate: if a stored rate violates the policy
        """
        try:
            policy = RatePolicy(**data.get("policy", {}))
            entries = data.get("rates", [])
        except (AttributeError, TypeError) as e:
            raise ValueError(f"Malformed Bank payload: {data!r}") from e

        bank = cls(policy)
        for entry in entries:
            try:
                source, target, rate = entry["from"], entry["to"], entry["rate"]
            except (KeyError, TypeError) as e:
                raise ValueError(f"Malformed rate entry: {entry!r}") from e
            if not isinstance(rate, int) or isinstance(rate, bool):
                raise ValueError(f"Rate must be int, got {rate!r} in entry {entry!r}")
            bank.add_rate(Currency.parse(source), Currency.parse(target), rate)
        return bank

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _check_currency(currency: Any) -> None:
        if not isinstance(currency, Currency):
            raise TypeError(
                f"Expected a Currency, not {type(currency).__name__}. "
                f"Use Currency.parse() for codes."
            )

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"Bank(rates={len(self._rates)}, policy={self.policy.name})"
