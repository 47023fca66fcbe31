"""Shared test fixtures for the funding lending bot."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from lendbot.config import StrategyConfig
from lendbot.exchange.client import FundingClient
from tests.helpers import make_candles, make_wallet


@pytest.fixture
def strategy_config() -> StrategyConfig:
    """USD strategy: min 50, full balance per loan, 30-day target, top candle."""
    return StrategyConfig(
        name="usd_main",
        keys="MAIN",
        currency="USD",
        min_amount=Decimal("50"),
        max_balance_percent_per_loan=Decimal("1"),
        min_rate=Decimal("0.0002"),
        target_period=30,
        monitored_window=24,
        nth_highest_candle=1,
    )


@pytest.fixture
def mock_client() -> AsyncMock:
    """Mock FundingClient: 100 USD funding wallet, no offers, top high 0.001."""
    client = AsyncMock(spec=FundingClient)
    client.get_wallet.return_value = make_wallet("100")
    client.get_active_offers.return_value = []
    client.get_candles.return_value = make_candles("0.0005", "0.001", "0.0008")
    return client
