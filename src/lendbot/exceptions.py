"""Custom exceptions for the funding lending bot.

Every failure raised during a strategy cycle derives from LendBotError so
the runner can log it and move on to the next strategy.
"""


class LendBotError(Exception):
    """Base exception for all bot errors."""


class ConfigurationError(LendBotError):
    """Raised at startup for missing credentials or malformed configuration."""


class WalletNotFound(LendBotError):
    """Raised when the funding wallet for a currency does not exist."""

    def __init__(self, currency: str) -> None:
        super().__init__(f"Funding wallet not found for {currency}")
        self.currency = currency


class DuplicateOfferDetected(LendBotError):
    """Raised after canceling all offers when more than one was active."""

    def __init__(self, currency: str, count: int) -> None:
        super().__init__(
            f"Detected {count} active offers on {currency}, "
            "which have all been canceled"
        )
        self.currency = currency
        self.count = count


class InsufficientData(LendBotError):
    """Raised when fewer candles were returned than the requested rank."""

    def __init__(self, required: int, received: int) -> None:
        super().__init__(
            f"Not enough candles fetched: {received} < {required}"
        )
        self.required = required
        self.received = received


class TransportError(LendBotError):
    """Raised when the exchange API call fails (network, auth, rejection)."""
