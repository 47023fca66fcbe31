"""Abstract funding client interface.

Strategies depend only on this contract; Bitfinex specifics stay in the
concrete implementation.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from lendbot.exchange.types import (
    CandleSection,
    CandleSort,
    FundingOfferType,
    TimeFrame,
)
from lendbot.models import ActiveOffer, Candle, Wallet


class FundingClient(ABC):
    """Abstract base class for margin-funding API clients."""

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        ...

    @abstractmethod
    async def get_wallet(self, currency: str) -> Wallet:
        """Return the funding wallet for ``currency``.

        Raises:
            WalletNotFound: If the account has no funding wallet in that currency.
        """
        ...

    @abstractmethod
    async def get_active_offers(self, symbol: str) -> list[ActiveOffer]:
        """Return every active funding offer on ``symbol`` (e.g. ``fUSD``)."""
        ...

    @abstractmethod
    async def cancel_all_offers(self, currency: str) -> None:
        """Cancel every funding offer in ``currency``."""
        ...

    @abstractmethod
    async def cancel_offer(self, offer_id: int) -> None:
        """Cancel a single funding offer."""
        ...

    @abstractmethod
    async def submit_offer(
        self,
        symbol: str,
        amount: Decimal,
        rate: Decimal,
        period: int,
        hidden: bool = True,
        offer_type: FundingOfferType = FundingOfferType.LIMIT,
    ) -> None:
        """Submit a funding offer."""
        ...

    @abstractmethod
    async def get_candles(
        self,
        symbol: str,
        time_frame: TimeFrame,
        period: int,
        start_ms: int,
        section: CandleSection = CandleSection.HISTORICAL,
        sort: CandleSort = CandleSort.ASCENDING,
    ) -> list[Candle]:
        """Fetch funding candles for ``symbol`` lent over ``period`` days.

        Returns candles starting at ``start_ms``, ordered according to ``sort``.
        Pagination is NOT handled here.
        """
        ...
