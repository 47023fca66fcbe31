"""Tests for SimpleStrategy -- the per-cycle offer decision engine.

Tests verify:
- Insufficient balance skips without touching the market or the account
- No standing offer -> submit at 99% of the discovered rate
- Acceptable standing offer is left alone (re-evaluation is idempotent)
- Drifted or oversized offers are cancelled and replaced
- Duplicate offers trigger exactly one cancel-all and abort the cycle
- Rate below min_rate retries once at a 2-day period, never more
- apply() maps each decision to the right client calls
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from lendbot.config import StrategyConfig
from lendbot.exceptions import DuplicateOfferDetected, InsufficientData, WalletNotFound
from lendbot.exchange.types import FundingOfferType, TimeFrame
from lendbot.models import CancelAndSubmit, CancelOnly, Skip, SubmitOnly
from lendbot.strategy.simple import SimpleStrategy
from tests.helpers import FIXED_NOW, make_candles, make_offer, make_wallet


def _strategy(config: StrategyConfig, client: AsyncMock) -> SimpleStrategy:
    return SimpleStrategy(config, client, clock=lambda: FIXED_NOW)


def _mutations(client: AsyncMock) -> list[str]:
    """Names of the account-mutating calls made on the client, in order."""
    mutating = {"cancel_offer", "cancel_all_offers", "submit_offer"}
    return [name for name, _, _ in client.mock_calls if name in mutating]


class TestInsufficientBalance:
    @pytest.mark.asyncio
    async def test_skips_below_min_amount(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_wallet.return_value = make_wallet(balance="10")
        strategy = _strategy(strategy_config, mock_client)

        decision = await strategy.execute()

        assert decision == Skip("insufficient balance")
        mock_client.get_candles.assert_not_awaited()
        assert _mutations(mock_client) == []

    @pytest.mark.asyncio
    async def test_locked_offer_funds_count_toward_minimum(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_wallet.return_value = make_wallet(balance="100", available="0")
        mock_client.get_active_offers.return_value = [make_offer(amount="100")]
        strategy = _strategy(strategy_config, mock_client)

        decision = await strategy.evaluate()

        assert decision != Skip("insufficient balance")
        mock_client.get_candles.assert_awaited()


class TestSubmitWithoutActiveOffer:
    @pytest.mark.asyncio
    async def test_submits_full_balance_at_discounted_rate(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        strategy = _strategy(strategy_config, mock_client)

        decision = await strategy.evaluate()

        assert decision == SubmitOnly(
            amount=Decimal("100"), rate=Decimal("0.00099"), period=30
        )

    @pytest.mark.asyncio
    async def test_execute_submits_hidden_limit_offer(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        strategy = _strategy(strategy_config, mock_client)

        await strategy.execute()

        mock_client.submit_offer.assert_awaited_once_with(
            "fUSD",
            Decimal("100"),
            Decimal("0.00099"),
            30,
            hidden=True,
            offer_type=FundingOfferType.LIMIT,
        )
        mock_client.cancel_offer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_amount_capped_by_balance_percent(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        config = strategy_config.model_copy(
            update={"max_balance_percent_per_loan": Decimal("0.25")}
        )
        mock_client.get_wallet.return_value = make_wallet(balance="1000")
        strategy = _strategy(config, mock_client)

        decision = await strategy.evaluate()

        assert isinstance(decision, SubmitOnly)
        assert decision.amount == Decimal("250")

    @pytest.mark.asyncio
    async def test_uses_nth_highest_candle(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        config = strategy_config.model_copy(update={"nth_highest_candle": 2})
        mock_client.get_candles.return_value = make_candles(
            "0.001", "0.005", "0.003", "0.009", "0.002"
        )
        strategy = _strategy(config, mock_client)

        decision = await strategy.evaluate()

        assert isinstance(decision, SubmitOnly)
        assert decision.rate == Decimal("0.005") * Decimal("0.99")


class TestActiveOffer:
    @pytest.mark.asyncio
    async def test_acceptable_offer_left_standing(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_wallet.return_value = make_wallet(balance="100", available="0")
        mock_client.get_active_offers.return_value = [
            make_offer(amount="100", rate="0.00099")
        ]
        strategy = _strategy(strategy_config, mock_client)

        first = await strategy.execute()
        second = await strategy.execute()

        assert first == second == Skip("active offer acceptable")
        assert _mutations(mock_client) == []

    @pytest.mark.asyncio
    async def test_drifted_rate_replaces_offer(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_wallet.return_value = make_wallet(balance="100", available="0")
        mock_client.get_active_offers.return_value = [
            make_offer(amount="100", rate="0.0005", offer_id=7)
        ]
        strategy = _strategy(strategy_config, mock_client)

        decision = await strategy.execute()

        assert decision == CancelAndSubmit(
            offer_id=7, amount=Decimal("100"), rate=Decimal("0.00099"), period=30
        )
        assert _mutations(mock_client) == ["cancel_offer", "submit_offer"]
        mock_client.cancel_offer.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_oversized_offer_replaced(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        config = strategy_config.model_copy(
            update={"max_balance_percent_per_loan": Decimal("0.5")}
        )
        mock_client.get_wallet.return_value = make_wallet(balance="200", available="0")
        mock_client.get_active_offers.return_value = [
            make_offer(amount="200", rate="0.00099")
        ]
        strategy = _strategy(config, mock_client)

        decision = await strategy.evaluate()

        assert isinstance(decision, CancelAndSubmit)
        assert decision.amount == Decimal("100")

    @pytest.mark.asyncio
    async def test_undersized_offer_kept(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_wallet.return_value = make_wallet(balance="500", available="440")
        mock_client.get_active_offers.return_value = [
            make_offer(amount="60", rate="0.00099")
        ]
        strategy = _strategy(strategy_config, mock_client)

        decision = await strategy.evaluate()

        assert decision == Skip("active offer acceptable")


class TestDuplicateOffers:
    @pytest.mark.asyncio
    async def test_cancels_all_and_aborts(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_active_offers.return_value = [
            make_offer(offer_id=1),
            make_offer(offer_id=2, amount="5"),
        ]
        strategy = _strategy(strategy_config, mock_client)

        with pytest.raises(DuplicateOfferDetected) as exc_info:
            await strategy.execute()

        assert exc_info.value.count == 2
        mock_client.cancel_all_offers.assert_awaited_once_with("USD")
        assert _mutations(mock_client) == ["cancel_all_offers"]
        mock_client.get_candles.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancels_all_even_with_low_balance(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_wallet.return_value = make_wallet(balance="0")
        mock_client.get_active_offers.return_value = [
            make_offer(offer_id=i) for i in range(3)
        ]
        strategy = _strategy(strategy_config, mock_client)

        with pytest.raises(DuplicateOfferDetected):
            await strategy.evaluate()

        mock_client.cancel_all_offers.assert_awaited_once()


class TestRateRetry:
    @pytest.fixture
    def retry_config(self, strategy_config: StrategyConfig) -> StrategyConfig:
        return strategy_config.model_copy(
            update={"target_period": 10, "min_rate": Decimal("0.001")}
        )

    @pytest.mark.asyncio
    async def test_retries_once_at_two_days(
        self, retry_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_candles.side_effect = [
            make_candles("0.0005"),
            make_candles("0.0004"),
        ]
        strategy = _strategy(retry_config, mock_client)

        decision = await strategy.evaluate()

        assert mock_client.get_candles.await_count == 2
        periods = [call.args[2] for call in mock_client.get_candles.await_args_list]
        assert periods == [10, 2]
        assert decision == SubmitOnly(
            amount=Decimal("100"), rate=Decimal("0.0004") * Decimal("0.99"), period=2
        )

    @pytest.mark.asyncio
    async def test_no_retry_when_rate_meets_minimum(
        self, retry_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_candles.return_value = make_candles("0.002")
        strategy = _strategy(retry_config, mock_client)

        decision = await strategy.evaluate()

        mock_client.get_candles.assert_awaited_once()
        assert isinstance(decision, SubmitOnly)
        assert decision.period == 10

    @pytest.mark.asyncio
    async def test_no_retry_when_already_two_days(
        self, retry_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        config = retry_config.model_copy(update={"target_period": 2})
        mock_client.get_candles.return_value = make_candles("0.0001")
        strategy = _strategy(config, mock_client)

        decision = await strategy.evaluate()

        mock_client.get_candles.assert_awaited_once()
        assert isinstance(decision, SubmitOnly)
        assert decision.period == 2

    @pytest.mark.asyncio
    async def test_fallback_failure_propagates(
        self, retry_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_candles.side_effect = [make_candles("0.0005"), []]
        strategy = _strategy(retry_config, mock_client)

        with pytest.raises(InsufficientData):
            await strategy.evaluate()

        assert _mutations(mock_client) == []


class TestFailures:
    @pytest.mark.asyncio
    async def test_missing_wallet_aborts(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        mock_client.get_wallet.side_effect = WalletNotFound("USD")
        strategy = _strategy(strategy_config, mock_client)

        with pytest.raises(WalletNotFound):
            await strategy.execute()

        assert _mutations(mock_client) == []


class TestApply:
    @pytest.mark.asyncio
    async def test_skip_does_nothing(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        await _strategy(strategy_config, mock_client).apply(Skip("anything"))
        assert _mutations(mock_client) == []

    @pytest.mark.asyncio
    async def test_cancel_only(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        await _strategy(strategy_config, mock_client).apply(CancelOnly(offer_id=9))
        mock_client.cancel_offer.assert_awaited_once_with(9)
        mock_client.submit_offer.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_candles_requested_for_funding_symbol(
        self, strategy_config: StrategyConfig, mock_client: AsyncMock
    ) -> None:
        await _strategy(strategy_config, mock_client).evaluate()
        call = mock_client.get_candles.await_args
        assert call.args[:2] == ("fUSD", TimeFrame.FIVE_MINUTES)
        mock_client.get_active_offers.assert_awaited_once_with("fUSD")
