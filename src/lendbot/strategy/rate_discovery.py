"""Rate discovery from recent funding candles.

Picks the nth-highest candle high over a lookback window rather than the
maximum, so a single transient spike that may never fill does not set the
offer rate.
"""

import time
from collections.abc import Callable, Sequence
from decimal import Decimal

from lendbot.exceptions import InsufficientData
from lendbot.exchange.client import FundingClient
from lendbot.exchange.types import CandleSection, CandleSort, TimeFrame, funding_symbol
from lendbot.logging import get_logger
from lendbot.models import Candle

logger = get_logger(__name__)

_MS_PER_HOUR = 3600 * 1000


def select_nth_highest(candles: Sequence[Candle], nth_highest: int) -> Decimal:
    """Return the ``nth_highest`` candle high (1-based, 1 == maximum).

    Equal highs keep their fetch order (``sorted`` is stable).

    Raises:
        InsufficientData: If fewer than ``nth_highest`` candles are given.
    """
    if len(candles) < nth_highest:
        raise InsufficientData(required=nth_highest, received=len(candles))

    ranked = sorted(candles, key=lambda candle: candle.high, reverse=True)
    return ranked[nth_highest - 1].high


class RateDiscovery:
    """Fetches funding candles for one currency and ranks their highs.

    Args:
        client: Funding API client.
        currency: Currency lent (e.g. ``USD``).
        monitored_window: Lookback in hours.
        clock: Returns the current Unix time in seconds.
    """

    def __init__(
        self,
        client: FundingClient,
        currency: str,
        monitored_window: int,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._symbol = funding_symbol(currency)
        self._monitored_window = monitored_window
        self._clock = clock

    def lookback_start_ms(self) -> int:
        """Start of the monitored window in Unix milliseconds."""
        now_ms = int(self._clock() * 1000)
        return now_ms - self._monitored_window * _MS_PER_HOUR

    async def discover_rate(self, nth_highest: int, period: int) -> Decimal:
        """Return the nth-highest 5-minute candle high for loans of ``period`` days."""
        candles = await self._client.get_candles(
            self._symbol,
            TimeFrame.FIVE_MINUTES,
            period,
            start_ms=self.lookback_start_ms(),
            section=CandleSection.HISTORICAL,
            sort=CandleSort.ASCENDING,
        )
        rate = select_nth_highest(candles, nth_highest)
        logger.debug(
            "rate_discovered",
            period=period,
            candles=len(candles),
            nth_highest=nth_highest,
            rate=str(rate),
        )
        return rate
