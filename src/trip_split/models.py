"""Pydantic domain models for TripSplit."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from .exceptions import TripNotFoundError

# ============================================================================
# Input Models
# ============================================================================


class Member(BaseModel):
    """A trip member."""

    id: str
    name: str


class ExpenseSplit(BaseModel):
    """One member's share of an expense."""

    user_id: str
    amount: Decimal


class Expense(BaseModel):
    """A shared expense paid by one member and split among several."""

    id: str
    title: str = ""
    amount: Decimal
    paid_by: str
    splits: list[ExpenseSplit] = Field(default_factory=list)

    def split_total(self) -> Decimal:
        """Sum of all split amounts."""
        return sum((split.amount for split in self.splits), Decimal("0"))


class Trip(BaseModel):
    """A trip: a roster of members and the expenses they logged."""

    id: str
    name: str
    members: list[Member] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)

    def has_member(self, user_id: str) -> bool:
        """Check whether a user is on this trip's roster."""
        return any(member.id == user_id for member in self.members)

    def total_expenses(self) -> Decimal:
        """Total amount spent on this trip."""
        return sum((expense.amount for expense in self.expenses), Decimal("0"))


class Ledger(BaseModel):
    """A collection of trips, as read from a ledger file."""

    trips: list[Trip] = Field(default_factory=list)

    def get_trip(self, trip_id: str) -> Trip:
        """Look up a trip by id."""
        for trip in self.trips:
            if trip.id == trip_id:
                return trip
        raise TripNotFoundError(trip_id)


# ============================================================================
# Balance Models
# ============================================================================


class BalanceRecord(BaseModel):
    """A member's position within one set of expenses.

    Sign convention for net_balance: positive = should receive money,
    negative = should pay.
    """

    user_id: str
    user_name: str
    total_owed: Decimal = Decimal("0")  # sum of the member's own shares
    total_owing: Decimal = Decimal("0")  # amount owed back to the member
    net_balance: Decimal = Decimal("0")


class CounterpartyAmount(BaseModel):
    """Cumulative amount between a member and one counterparty."""

    user_id: str
    user_name: str
    amount: Decimal


class DetailedBalanceRecord(BalanceRecord):
    """Balance record with pairwise debts, aggregated but never netted."""

    owes_to: list[CounterpartyAmount] = Field(default_factory=list)
    owed_by: list[CounterpartyAmount] = Field(default_factory=list)


class ExpenseShare(BaseModel):
    """A member's share of one expense someone else paid for."""

    expense_id: str
    expense_title: str
    expense_amount: Decimal
    user_share: Decimal


class PayerBreakdown(BaseModel):
    """Everything one payer covered for a member."""

    paid_by: str
    paid_by_name: str
    total_paid_for_user: Decimal = Decimal("0")
    expenses: list[ExpenseShare] = Field(default_factory=list)


class MemberExpenseBreakdown(BaseModel):
    """A member's debts grouped by the payer who covered them."""

    user_id: str
    user_name: str
    total_owed: Decimal = Decimal("0")
    paid_by_breakdown: list[PayerBreakdown] = Field(default_factory=list)


class UserTotalBalance(BaseModel):
    """A single user's aggregate position over a flat list of expenses."""

    total_owed: Decimal = Decimal("0")
    total_owing: Decimal = Decimal("0")
    net_balance: Decimal = Decimal("0")


class SettlementSuggestion(BaseModel):
    """One recommended transfer from a debtor to a creditor."""

    from_user_id: str
    from_user_name: str
    to_user_id: str
    to_user_name: str
    amount: Decimal


class BalanceStatus(BaseModel):
    """Human-readable description of a net balance."""

    text: str
    tone: Literal["positive", "negative", "settled"]


class SplitDiscrepancy(BaseModel):
    """An expense whose splits do not add up to its amount."""

    expense_id: str
    expense_amount: Decimal
    split_total: Decimal
    difference: Decimal  # expense_amount - split_total


# ============================================================================
# Report Models
# ============================================================================


class TripSummary(BaseModel):
    """Balances and settlement plan for one trip."""

    trip_id: str
    trip_name: str
    total_expenses: Decimal
    balances: list[BalanceRecord]
    settlements: list[SettlementSuggestion]


class TripBalance(BaseModel):
    """A user's outstanding amounts on one trip."""

    trip_id: str
    trip_name: str
    total_owed: Decimal
    total_owing: Decimal


class UserBalanceReport(BaseModel):
    """A user's position across all of their trips."""

    user_id: str
    total_owed: Decimal
    total_owing: Decimal
    net_balance: Decimal
    trip_balances: list[TripBalance] = Field(default_factory=list)
