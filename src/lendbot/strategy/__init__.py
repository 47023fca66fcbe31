"""Lending strategies and their decision helpers."""

from lendbot.strategy.base import Strategy
from lendbot.strategy.factory import bitfinex_client_factory, build_strategies
from lendbot.strategy.simple import SimpleStrategy

__all__ = ["SimpleStrategy", "Strategy", "bitfinex_client_factory", "build_strategies"]
