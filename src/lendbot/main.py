"""Entry point for the funding lending bot.

Component wiring order:
1. AppSettings (environment configuration)
2. Logging setup
3. Strategy entries from the YAML file (credentials resolved from env)
4. One BitfinexClient + SimpleStrategy per entry
5. StrategyRunner (sequential polling loop)

SIGINT/SIGTERM stop the runner after the current tick.
"""

import asyncio
import signal
import sys

from pydantic import ValidationError

from lendbot.config import AppSettings, load_strategies
from lendbot.exceptions import ConfigurationError
from lendbot.logging import get_logger, setup_logging
from lendbot.runner import StrategyRunner
from lendbot.strategy.factory import bitfinex_client_factory, build_strategies


def build_runner(settings: AppSettings) -> StrategyRunner:
    """Load strategies and wire them into a runner.

    Raises:
        ConfigurationError: If the strategy file or credentials are invalid.
    """
    entries = load_strategies(settings.runner.strategies_path)
    strategies = build_strategies(entries, bitfinex_client_factory(settings.exchange))
    return StrategyRunner(strategies, poll_interval=settings.runner.poll_interval)


def _setup_signal_handlers(runner: StrategyRunner) -> None:
    """Register SIGINT/SIGTERM for graceful stop. Needs a running loop."""
    logger = get_logger("lendbot.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        runner.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


async def run(settings: AppSettings) -> None:
    """Run the lending bot until stopped."""
    logger = get_logger("lendbot.main")
    runner = build_runner(settings)

    _setup_signal_handlers(runner)

    try:
        await runner.start()
    finally:
        await runner.close()
        logger.info("lendbot_stopped")


def main() -> None:
    """Synchronous entry point."""
    try:
        settings = AppSettings()
    except ValidationError as e:
        get_logger("lendbot.main").critical("invalid_settings", error=str(e))
        sys.exit(1)
    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("lendbot.main")

    try:
        asyncio.run(run(settings))
    except ConfigurationError as e:
        logger.critical("configuration_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
