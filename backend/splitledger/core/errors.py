class LedgerError(Exception):
    """Base class for every error raised by the ledger core."""


class InvalidInput(LedgerError, ValueError):
    """Rejected before any computation: bad counts, amounts or participants."""


class DataConsistencyFault(LedgerError):
    """The rows handed to the core do not add up (balances or splits)."""

    def __init__(self, message: str, discrepancy=None):
        super().__init__(message)
        self.discrepancy = discrepancy


class RoundingViolation(LedgerError, AssertionError):
    """A distribution lost or invented a cent. Always a bug."""
