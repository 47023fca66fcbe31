"""Exchange-specific enums and helpers for Bitfinex funding endpoints."""

from enum import Enum


class TimeFrame(str, Enum):
    """Candle resolutions used by the bot."""

    FIVE_MINUTES = "5m"
    ONE_HOUR = "1h"


class CandleSection(str, Enum):
    """Candle endpoint section."""

    HISTORICAL = "hist"
    LAST = "last"


class CandleSort(int, Enum):
    """Candle ordering by timestamp."""

    ASCENDING = 1
    DESCENDING = -1


class FundingOfferType(str, Enum):
    """Funding offer order types accepted by Bitfinex."""

    LIMIT = "LIMIT"
    FRR_DELTA_VAR = "FRRDELTAVAR"
    FRR_DELTA_FIX = "FRRDELTAFIX"


# Bitfinex offer flag for hidden offers
HIDDEN_FLAG = 64

FUNDING_WALLET_TYPE = "funding"


def funding_symbol(currency: str) -> str:
    """Return the funding market symbol for a currency (``USD`` -> ``fUSD``)."""
    return f"f{currency}"


def candle_key(symbol: str, time_frame: TimeFrame, period: int) -> str:
    """Build a funding candle key such as ``trade:5m:fUSD:p30``."""
    return f"trade:{time_frame.value}:{symbol}:p{period}"
