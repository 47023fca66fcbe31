"""Bitfinex funding client implementation via ccxt async.

ccxt's unified API does not cover margin funding, so this client calls the
implicit Bitfinex v2 REST endpoints and parses their raw array rows.
"""

from decimal import Decimal

import ccxt.async_support as ccxt_async

from lendbot.config import ApiCredentials, ExchangeSettings
from lendbot.exceptions import TransportError, WalletNotFound
from lendbot.exchange.client import FundingClient
from lendbot.exchange.types import (
    FUNDING_WALLET_TYPE,
    HIDDEN_FLAG,
    CandleSection,
    CandleSort,
    FundingOfferType,
    TimeFrame,
    candle_key,
)
from lendbot.logging import get_logger
from lendbot.models import ActiveOffer, Candle, Wallet

logger = get_logger(__name__)

# Wallet row: [TYPE, CURRENCY, BALANCE, UNSETTLED_INTEREST, AVAILABLE_BALANCE, ...]
_WALLET_TYPE, _WALLET_CURRENCY, _WALLET_BALANCE, _WALLET_AVAILABLE = 0, 1, 2, 4

# Offer row: [ID, SYMBOL, MTS_CREATE, MTS_UPDATE, AMOUNT, ..., RATE(14), PERIOD(15), ...]
_OFFER_ID, _OFFER_SYMBOL, _OFFER_AMOUNT, _OFFER_RATE, _OFFER_PERIOD = 0, 1, 4, 14, 15

# Implicit Bitfinex v2 endpoints on ccxt.async_support.bitfinex
WALLETS_ENDPOINT = "private_post_auth_r_wallets"
OFFERS_ENDPOINT = "private_post_auth_r_funding_offers_symbol"
SUBMIT_ENDPOINT = "private_post_auth_w_funding_offer_submit"
CANCEL_ENDPOINT = "private_post_auth_w_funding_offer_cancel"
CANCEL_ALL_ENDPOINT = "private_post_auth_w_funding_offer_cancel_all"
CANDLES_ENDPOINT = "public_get_candles_trade_timeframe_symbol_period_section"

ENDPOINTS = (
    WALLETS_ENDPOINT,
    OFFERS_ENDPOINT,
    SUBMIT_ENDPOINT,
    CANCEL_ENDPOINT,
    CANCEL_ALL_ENDPOINT,
    CANDLES_ENDPOINT,
)


def _dec(value: object, field: str) -> Decimal:
    """Convert a raw numeric field to Decimal without float artefacts.

    Raises:
        TransportError: If the exchange returned null for the field.
    """
    if value is None:
        raise TransportError(f"Bitfinex returned null {field}")
    return Decimal(str(value))


def parse_wallet(row: list) -> Wallet:
    """Parse a Bitfinex wallet row."""
    return Wallet(
        currency=row[_WALLET_CURRENCY],
        balance=_dec(row[_WALLET_BALANCE], "wallet balance"),
        available_balance=_dec(row[_WALLET_AVAILABLE], "wallet available balance"),
    )


def parse_offer(row: list) -> ActiveOffer:
    """Parse a Bitfinex funding offer row."""
    symbol = row[_OFFER_SYMBOL]
    return ActiveOffer(
        id=int(row[_OFFER_ID]),
        currency=symbol[1:] if symbol.startswith("f") else symbol,
        amount=_dec(row[_OFFER_AMOUNT], "offer amount"),
        rate=_dec(row[_OFFER_RATE], "offer rate"),
        period=int(row[_OFFER_PERIOD]),
    )


def parse_candle(row: list) -> Candle:
    """Parse a Bitfinex candle row: [MTS, OPEN, CLOSE, HIGH, LOW, VOLUME]."""
    return Candle(
        timestamp=int(row[0]),
        open=_dec(row[1], "candle open"),
        close=_dec(row[2], "candle close"),
        high=_dec(row[3], "candle high"),
        low=_dec(row[4], "candle low"),
        volume=_dec(row[5], "candle volume"),
    )


class BitfinexClient(FundingClient):
    """Concrete Bitfinex funding client using ccxt async.

    Each instance owns its own credentials, so strategies running on
    different accounts never share a connection.
    """

    def __init__(self, credentials: ApiCredentials, settings: ExchangeSettings) -> None:
        self._exchange = ccxt_async.bitfinex(
            {
                "apiKey": credentials.api_key.get_secret_value(),
                "secret": credentials.api_secret.get_secret_value(),
                "enableRateLimit": settings.enable_rate_limit,
                "timeout": settings.timeout_ms,
            }
        )

    @property
    def exchange(self) -> ccxt_async.bitfinex:
        """Access the underlying ccxt exchange instance."""
        return self._exchange

    async def close(self) -> None:
        """Clean up ccxt async resources."""
        await self._exchange.close()
        logger.debug("bitfinex_connection_closed")

    async def _call(self, endpoint: str, params: dict) -> list:
        """Invoke an implicit ccxt endpoint, mapping failures to TransportError."""
        method = getattr(self._exchange, endpoint, None)
        if method is None:
            raise TransportError(f"{endpoint} is not available in the installed ccxt")
        try:
            return await method(params)
        except ccxt_async.BaseError as e:
            raise TransportError(f"{endpoint} failed: {e}") from e

    async def get_wallet(self, currency: str) -> Wallet:
        rows = await self._call(WALLETS_ENDPOINT, {})
        for row in rows:
            if row[_WALLET_TYPE] == FUNDING_WALLET_TYPE and row[_WALLET_CURRENCY] == currency:
                return parse_wallet(row)
        raise WalletNotFound(currency)

    async def get_active_offers(self, symbol: str) -> list[ActiveOffer]:
        rows = await self._call(
            OFFERS_ENDPOINT, {"symbol": symbol}
        )
        return [parse_offer(row) for row in rows]

    async def cancel_all_offers(self, currency: str) -> None:
        logger.info("cancelling_all_offers", currency=currency)
        await self._call(
            CANCEL_ALL_ENDPOINT, {"currency": currency}
        )

    async def cancel_offer(self, offer_id: int) -> None:
        logger.info("cancelling_offer", offer_id=offer_id)
        await self._call(CANCEL_ENDPOINT, {"id": offer_id})

    async def submit_offer(
        self,
        symbol: str,
        amount: Decimal,
        rate: Decimal,
        period: int,
        hidden: bool = True,
        offer_type: FundingOfferType = FundingOfferType.LIMIT,
    ) -> None:
        params = {
            "type": offer_type.value,
            "symbol": symbol,
            "amount": str(amount),
            "rate": str(rate),
            "period": period,
            "flags": HIDDEN_FLAG if hidden else 0,
        }
        logger.info("submitting_offer", symbol=symbol, amount=str(amount), period=period)
        await self._call(SUBMIT_ENDPOINT, params)

    async def get_candles(
        self,
        symbol: str,
        time_frame: TimeFrame,
        period: int,
        start_ms: int,
        section: CandleSection = CandleSection.HISTORICAL,
        sort: CandleSort = CandleSort.ASCENDING,
    ) -> list[Candle]:
        rows = await self._call(
            CANDLES_ENDPOINT,
            {
                "timeframe": time_frame.value,
                "symbol": symbol,
                "period": f"p{period}",
                "section": section.value,
                "sort": sort.value,
                "start": start_ms,
            },
        )
        candles = [parse_candle(row) for row in rows]
        logger.debug(
            "candles_fetched",
            key=candle_key(symbol, time_frame, period),
            count=len(candles),
        )
        return candles
