"""Simple lending strategy -- keep one hidden funding offer per currency.

Each cycle:
  1. FETCH: funding wallet and active offers (cancel all if more than one)
  2. BALANCE: treat funds locked in the standing offer as available
  3. RATE: nth-highest 5m candle high over the monitored window, retried
     once at a 2-day period when below min_rate, then discounted by 1%
  4. SIZE: clamp the loan between min_amount and the liquid/capped balance
  5. DECIDE: keep, replace, or submit

Nothing is carried over between cycles.
"""

import time
from collections.abc import Callable
from decimal import Decimal

from lendbot.config import StrategyConfig
from lendbot.exceptions import DuplicateOfferDetected
from lendbot.exchange.client import FundingClient
from lendbot.exchange.types import FundingOfferType, funding_symbol
from lendbot.logging import format_rate, get_logger, strategy_context
from lendbot.models import (
    ActiveOffer,
    CancelAndSubmit,
    CancelOnly,
    Decision,
    Skip,
    SubmitOnly,
    Wallet,
)
from lendbot.strategy.balances import compute_balances, compute_loan_amount, needs_replacement
from lendbot.strategy.base import Strategy
from lendbot.strategy.rate_discovery import RateDiscovery

logger = get_logger(__name__)

# Shortest period Bitfinex accepts for funding offers
FALLBACK_PERIOD = 2

# Never offer at the literal historical peak
RATE_DISCOUNT = Decimal("0.99")

SKIP_INSUFFICIENT_BALANCE = "insufficient balance"
SKIP_OFFER_ACCEPTABLE = "active offer acceptable"


class SimpleStrategy(Strategy):
    """Single-offer lending strategy for one currency.

    Args:
        config: Immutable strategy parameters.
        client: Funding API client owned by this strategy.
        clock: Returns the current Unix time in seconds.
    """

    def __init__(
        self,
        config: StrategyConfig,
        client: FundingClient,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._client = client
        self._symbol = funding_symbol(config.currency)
        self._rate_discovery = RateDiscovery(
            client, config.currency, config.monitored_window, clock=clock
        )

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def currency(self) -> str:
        return self._config.currency

    @property
    def config(self) -> StrategyConfig:
        return self._config

    async def close(self) -> None:
        await self._client.close()

    async def fetch_active_offer(self) -> ActiveOffer | None:
        """Return the single standing offer, if any.

        Raises:
            DuplicateOfferDetected: After canceling every offer in the
                currency when more than one was standing.
        """
        offers = await self._client.get_active_offers(self._symbol)

        if len(offers) > 1:
            logger.warning("duplicate_offers_detected", count=len(offers))
            await self._client.cancel_all_offers(self.currency)
            raise DuplicateOfferDetected(self.currency, len(offers))

        return offers[0] if offers else None

    async def discover_target_rate(self) -> tuple[Decimal, int]:
        """Return ``(rate, period)`` for the next offer, before discount.

        Falls back to a 2-day period exactly once when the target-period rate
        is below ``min_rate``; the fallback rate is used even if it is lower.
        """
        period = self._config.target_period
        rate = await self._rate_discovery.discover_rate(
            self._config.nth_highest_candle, period
        )

        if rate < self._config.min_rate and period > FALLBACK_PERIOD:
            logger.info(
                "rate_below_minimum_retrying",
                period=period,
                fallback_period=FALLBACK_PERIOD,
                rate=str(rate),
                min_rate=str(self._config.min_rate),
            )
            period = FALLBACK_PERIOD
            rate = await self._rate_discovery.discover_rate(
                self._config.nth_highest_candle, period
            )

        return rate, period

    async def evaluate(self) -> Decision:
        wallet: Wallet = await self._client.get_wallet(self.currency)
        active_offer = await self.fetch_active_offer()

        available_balance, total_balance = compute_balances(wallet, active_offer)

        if available_balance < self._config.min_amount:
            logger.info(
                "insufficient_balance",
                available_balance=str(available_balance),
                min_amount=str(self._config.min_amount),
            )
            return Skip(SKIP_INSUFFICIENT_BALANCE)

        rate, period = await self.discover_target_rate()
        rate *= RATE_DISCOUNT

        loan_amount = compute_loan_amount(
            self._config.min_amount,
            available_balance,
            total_balance,
            self._config.max_balance_percent_per_loan,
        )

        if active_offer is not None:
            if needs_replacement(active_offer, loan_amount, rate):
                return CancelAndSubmit(
                    offer_id=active_offer.id,
                    amount=loan_amount,
                    rate=rate,
                    period=period,
                )

            logger.info(
                "active_offer_acceptable",
                amount=str(active_offer.amount),
                **format_rate(active_offer.rate),
            )
            return Skip(SKIP_OFFER_ACCEPTABLE)

        return SubmitOnly(amount=loan_amount, rate=rate, period=period)

    async def apply(self, decision: Decision) -> None:
        if isinstance(decision, Skip):
            return

        if isinstance(decision, (CancelOnly, CancelAndSubmit)):
            await self._client.cancel_offer(decision.offer_id)
            logger.info("offer_cancelled", offer_id=decision.offer_id)

        if isinstance(decision, (CancelAndSubmit, SubmitOnly)):
            await self._client.submit_offer(
                self._symbol,
                decision.amount,
                decision.rate,
                decision.period,
                hidden=True,
                offer_type=FundingOfferType.LIMIT,
            )
            logger.info(
                "offer_submitted",
                amount=str(decision.amount),
                period=decision.period,
                **format_rate(decision.rate),
            )

    async def execute(self) -> Decision:
        with strategy_context(self.name, self.currency):
            logger.info("strategy_executing")
            return await super().execute()
