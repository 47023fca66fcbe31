"""Abstract strategy interface.

The runner drives strategies only through this contract. A new kind of
strategy adds a subclass; the runner does not change.
"""

from abc import ABC, abstractmethod

from lendbot.models import Decision


class Strategy(ABC):
    """One independently configured lending strategy."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Configured strategy name."""
        ...

    @property
    @abstractmethod
    def currency(self) -> str:
        """Currency this strategy lends."""
        ...

    @abstractmethod
    async def evaluate(self) -> Decision:
        """Fetch fresh account and market state and decide what to do."""
        ...

    @abstractmethod
    async def apply(self, decision: Decision) -> None:
        """Carry out a decision through the exchange client."""
        ...

    async def execute(self) -> Decision:
        """Run one full cycle: evaluate, then apply."""
        decision = await self.evaluate()
        await self.apply(decision)
        return decision

    async def close(self) -> None:
        """Release resources held by the strategy. No-op by default."""
