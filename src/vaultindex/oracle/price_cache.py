"""Per-event price cache.

A PriceCache lives for the processing of one event (one block, at most) and
is passed explicitly to every oracle lookup made while handling it, so that
vaults sharing a token pair trigger a single oracle call.
"""

from vaultindex.exceptions import PriceUnavailableError
from vaultindex.logging import get_logger
from vaultindex.oracle.client import PriceOracle

logger = get_logger(__name__)


class PriceCache:
    """Ticks fetched during one event, keyed by block and ordered token pair.

    Failed lookups are cached too, so a reverting oracle is only called once
    per pair for the lifetime of the cache.

    Args:
        block_number: Block the cached ticks belong to.
    """

    def __init__(self, block_number: int) -> None:
        self.block_number = block_number
        self._ticks: dict[tuple[str, str], int | None] = {}

    def get_tick(self, oracle: PriceOracle, token0: str, token1: str) -> int:
        """Return the cached tick for (token0, token1), querying the oracle once.

        Raises:
            PriceUnavailableError: If the oracle reverted for this pair.
        """
        key = (token0, token1)
        if key not in self._ticks:
            try:
                self._ticks[key] = oracle.get_tick(token0, token1)
            except PriceUnavailableError:
                self._ticks[key] = None
                logger.debug(
                    "oracle_price_unavailable",
                    token0=token0,
                    token1=token1,
                    block_number=self.block_number,
                )
                raise
        tick = self._ticks[key]
        if tick is None:
            raise PriceUnavailableError(
                f"no price for {token0}/{token1} at block {self.block_number}"
            )
        return tick

    def __len__(self) -> int:
        return len(self._ticks)
