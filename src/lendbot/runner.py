"""Strategy runner -- drives every configured strategy once per tick.

Strategies run one after another within a tick. A failure in one strategy
is logged and never stops the others or the next tick.
"""

import asyncio
from collections.abc import Sequence

from lendbot.logging import get_logger
from lendbot.models import Decision
from lendbot.strategy.base import Strategy

logger = get_logger(__name__)


class StrategyRunner:
    """Sequential polling loop over independent strategies.

    Args:
        strategies: Strategies in configuration order.
        poll_interval: Seconds to sleep between ticks.
    """

    def __init__(self, strategies: Sequence[Strategy], poll_interval: float) -> None:
        self._strategies = list(strategies)
        self._poll_interval = poll_interval
        self._running = False
        self._ticks = 0

    @property
    def strategies(self) -> list[Strategy]:
        return list(self._strategies)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def ticks(self) -> int:
        return self._ticks

    async def run_tick(self) -> dict[str, Decision | Exception]:
        """Execute every strategy once, in order.

        Returns:
            Mapping of strategy name to its decision, or the exception that
            aborted its cycle.
        """
        results: dict[str, Decision | Exception] = {}
        for strategy in self._strategies:
            try:
                results[strategy.name] = await strategy.execute()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(
                    "strategy_cycle_failed",
                    strategy=strategy.name,
                    currency=strategy.currency,
                    error_type=type(e).__name__,
                    error=str(e),
                    exc_info=True,
                )
                results[strategy.name] = e
        self._ticks += 1
        return results

    async def start(self) -> None:
        """Run ticks until stop() is called."""
        logger.info(
            "runner_starting",
            strategies=[strategy.name for strategy in self._strategies],
            poll_interval=self._poll_interval,
        )
        self._running = True
        try:
            while self._running:
                await self.run_tick()
                if self._running:
                    await asyncio.sleep(self._poll_interval)
        except asyncio.CancelledError:
            logger.info("runner_cancelled")
        finally:
            self._running = False
            logger.info("runner_stopped", ticks=self._ticks)

    def stop(self) -> None:
        """Stop after the current tick completes."""
        logger.info("runner_stopping_gracefully")
        self._running = False

    async def close(self) -> None:
        """Close every strategy's exchange client."""
        for strategy in self._strategies:
            try:
                await strategy.close()
            except Exception as e:
                logger.warning("strategy_close_failed", strategy=strategy.name, error=str(e))
