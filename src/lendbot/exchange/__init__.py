"""Exchange client layer -- Bitfinex funding API via ccxt."""

from lendbot.exchange.bitfinex_client import BitfinexClient
from lendbot.exchange.client import FundingClient
from lendbot.exchange.types import FundingOfferType, TimeFrame, funding_symbol

__all__ = ["BitfinexClient", "FundingClient", "FundingOfferType", "TimeFrame", "funding_symbol"]
