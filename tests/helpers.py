"""Factories for test data shared across test modules."""

from decimal import Decimal

from lendbot.models import ActiveOffer, Candle, Wallet

# 2024-01-01T00:00:00Z
FIXED_NOW = 1704067200.0


def make_wallet(balance: str = "100", available: str | None = None) -> Wallet:
    return Wallet(
        currency="USD",
        balance=Decimal(balance),
        available_balance=Decimal(available if available is not None else balance),
    )


def make_candle(high: str | Decimal, timestamp: int = 0) -> Candle:
    """Create a candle where only the high matters."""
    high = Decimal(str(high))
    return Candle(
        timestamp=timestamp,
        open=high,
        close=high,
        high=high,
        low=high,
        volume=Decimal("1000"),
    )


def make_candles(*highs: str) -> list[Candle]:
    """Create an ascending series of 5-minute candles from highs."""
    return [make_candle(high, timestamp=i * 300_000) for i, high in enumerate(highs)]


def make_offer(
    amount: str = "100",
    rate: str = "0.00099",
    offer_id: int = 42,
    period: int = 30,
) -> ActiveOffer:
    return ActiveOffer(
        id=offer_id,
        currency="USD",
        amount=Decimal(amount),
        rate=Decimal(rate),
        period=period,
    )
