"""Shared data models for the funding lending bot.

All monetary values and rates use Decimal. Rates are per-day fractions
(0.0005 == 0.05% per day).

Every object here is a snapshot taken during one evaluation cycle and is
discarded when the cycle ends.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Wallet:
    """Funding wallet balances for one currency."""

    currency: str
    balance: Decimal
    available_balance: Decimal


@dataclass(frozen=True)
class ActiveOffer:
    """A funding offer currently standing on the book."""

    id: int
    currency: str
    amount: Decimal
    rate: Decimal
    period: int  # days


@dataclass(frozen=True)
class Candle:
    """A funding candle. Only ``high`` drives rate discovery."""

    timestamp: int  # Unix milliseconds
    open: Decimal
    close: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal


@dataclass(frozen=True)
class Decision:
    """Base class for the outcome of one strategy evaluation."""


@dataclass(frozen=True)
class Skip(Decision):
    """Leave everything as it is."""

    reason: str


@dataclass(frozen=True)
class CancelOnly(Decision):
    """Cancel the active offer without placing a new one."""

    offer_id: int


@dataclass(frozen=True)
class CancelAndSubmit(Decision):
    """Replace the active offer with a new one."""

    offer_id: int
    amount: Decimal
    rate: Decimal
    period: int


@dataclass(frozen=True)
class SubmitOnly(Decision):
    """Place a new offer; nothing is standing."""

    amount: Decimal
    rate: Decimal
    period: int
