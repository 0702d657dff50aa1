"""Custom exceptions for the vault indexer.

The math kernel and the estimators never raise for data-dependent input;
these exceptions cover collaborator failures and dispatcher bugs only.
"""


class IndexerError(Exception):
    """Base exception for all indexer errors."""


class PriceUnavailableError(IndexerError):
    """Raised when the price oracle reverts or has no price for a pair."""


class VaultNotFoundError(IndexerError):
    """Raised when an observation references a vault that was never registered."""


class InvalidLockIndexError(IndexerError):
    """Raised when a lock bucket index is below the infinite-lock sentinel."""
