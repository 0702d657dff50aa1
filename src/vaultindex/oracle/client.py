"""Abstract price oracle interface.

Defines the contract for the oracle collaborator. Tracker code depends only
on this interface, keeping chain-call details in the concrete implementation.
"""

from abc import ABC, abstractmethod


class PriceOracle(ABC):
    """Abstract base class for TWAP price oracles."""

    @abstractmethod
    def get_tick(self, token0: str, token1: str) -> int:
        """Return the price of token1 per token0 as a Q21.42 log tick.

        Raises:
            PriceUnavailableError: If the oracle call reverts.
        """
        ...
