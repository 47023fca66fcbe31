"""Build strategy instances from loaded configuration."""

from collections.abc import Callable, Sequence

from lendbot.config import ApiCredentials, ExchangeSettings, StrategyEntry
from lendbot.exchange.bitfinex_client import BitfinexClient
from lendbot.exchange.client import FundingClient
from lendbot.strategy.base import Strategy
from lendbot.strategy.simple import SimpleStrategy

ClientFactory = Callable[[ApiCredentials], FundingClient]


def bitfinex_client_factory(settings: ExchangeSettings) -> ClientFactory:
    """Return a factory creating one Bitfinex client per credential pair."""

    def _create(credentials: ApiCredentials) -> FundingClient:
        return BitfinexClient(credentials, settings)

    return _create


def build_strategies(
    entries: Sequence[StrategyEntry], client_factory: ClientFactory
) -> list[Strategy]:
    """Create one SimpleStrategy per entry, each with its own client."""
    return [
        SimpleStrategy(entry.config, client_factory(entry.credentials))
        for entry in entries
    ]
