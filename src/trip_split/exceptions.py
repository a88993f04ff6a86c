"""Custom exceptions for TripSplit."""

from decimal import Decimal


class TripSplitError(Exception):
    """Base exception for all TripSplit errors."""

    pass


class ConfigurationError(TripSplitError):
    """Raised when configuration is invalid or missing."""

    pass


class LedgerFileError(TripSplitError):
    """Raised when a ledger file cannot be read or fails validation."""

    pass


class TripNotFoundError(TripSplitError):
    """Raised when a trip id is not present in the ledger."""

    def __init__(self, trip_id: str, message: str | None = None):
        self.trip_id = trip_id
        super().__init__(message or f"Trip '{trip_id}' not found in ledger")


class SettlementInvariantError(TripSplitError):
    """Raised when the settlement sweep computes a non-positive transfer.

    Creditors and debtors are partitioned by sign before matching, so this
    only happens when balances were corrupted upstream.
    """

    def __init__(self, creditor_id: str, debtor_id: str, amount: Decimal):
        self.creditor_id = creditor_id
        self.debtor_id = debtor_id
        self.amount = amount
        super().__init__(
            f"Non-positive transfer of {amount} between debtor '{debtor_id}' "
            f"and creditor '{creditor_id}'"
        )
