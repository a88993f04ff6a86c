"""Service layer that composes balance calculations per trip and across trips.

This module provides a higher-level API over the pure functions in
``calculator`` and applies the application settings to them.
"""

import logging
from collections.abc import Iterable

from .calculator import (
    compute_balances,
    compute_detailed_balances,
    compute_payer_breakdowns,
    compute_user_total_balance,
    find_split_discrepancies,
    has_unsettled_amounts,
    suggest_settlements,
)
from .config import Settings
from .models import (
    BalanceRecord,
    DetailedBalanceRecord,
    MemberExpenseBreakdown,
    SettlementSuggestion,
    Trip,
    TripBalance,
    TripSummary,
    UserBalanceReport,
)

logger = logging.getLogger(__name__)


class BalanceService:
    """Service for computing trip balances and settlement plans."""

    def __init__(self, settings: Settings):
        """Initialize the balance service."""
        self.settings = settings

    def check_splits(self, trip: Trip) -> int:
        """
        Log a warning for every expense whose splits don't match its amount.

        Returns:
            Number of mismatched expenses
        """
        discrepancies = find_split_discrepancies(trip.expenses)
        for item in discrepancies:
            logger.warning(
                f"Trip {trip.id}: expense {item.expense_id} splits total "
                f"{item.split_total} but amount is {item.expense_amount} "
                f"(difference {item.difference})"
            )
        return len(discrepancies)

    def trip_balances(self, trip: Trip) -> list[BalanceRecord]:
        """Per-member balances for a trip."""
        self.check_splits(trip)
        return compute_balances(trip.expenses, trip.members)

    def trip_detailed_balances(self, trip: Trip) -> list[DetailedBalanceRecord]:
        """Per-member balances with the pairwise who-owes-whom breakdown."""
        self.check_splits(trip)
        return compute_detailed_balances(trip.expenses, trip.members)

    def trip_expense_breakdowns(self, trip: Trip) -> list[MemberExpenseBreakdown]:
        """Each member's debts grouped by payer, with the expenses behind them."""
        self.check_splits(trip)
        return compute_payer_breakdowns(trip.expenses, trip.members)

    def trip_settlements(self, trip: Trip) -> list[SettlementSuggestion]:
        """
        Suggest transfers that settle a trip.

        Uses the pairwise balances, which leave out self-shares and therefore
        always sum to zero across the roster.
        """
        balances = self.trip_detailed_balances(trip)
        suggestions = suggest_settlements(
            balances, strict=self.settings.strict_settlement
        )

        logger.info(
            f"Trip {trip.id}: {len(suggestions)} settlement transfers "
            f"for {len(trip.members)} members"
        )

        return suggestions

    def summarize_trip(self, trip: Trip) -> TripSummary:
        """Balances, settlement plan and total spend for a trip."""
        return TripSummary(
            trip_id=trip.id,
            trip_name=trip.name,
            total_expenses=trip.total_expenses(),
            balances=self.trip_balances(trip),
            settlements=self.trip_settlements(trip),
        )

    def has_unsettled_amounts(self, trip: Trip) -> bool:
        """Check whether anyone on the trip still owes money."""
        return has_unsettled_amounts(self.trip_balances(trip))

    def user_balance(self, user_id: str, trips: Iterable[Trip]) -> UserBalanceReport:
        """
        Compute a user's position across every trip they belong to.

        Trips where the user isn't a member are ignored. A trip only appears in
        the per-trip list when the user owes or is owed something on it.

        Args:
            user_id: The member to report on
            trips: Trips to consider

        Returns:
            Aggregate report with per-trip breakdown
        """
        report = UserBalanceReport(
            user_id=user_id,
            total_owed=0,
            total_owing=0,
            net_balance=0,
        )

        for trip in trips:
            if not trip.has_member(user_id):
                continue

            balance = compute_user_total_balance(user_id, trip.expenses)
            report.total_owed += balance.total_owed
            report.total_owing += balance.total_owing

            if balance.total_owed > 0 or balance.total_owing > 0:
                report.trip_balances.append(
                    TripBalance(
                        trip_id=trip.id,
                        trip_name=trip.name,
                        total_owed=balance.total_owed,
                        total_owing=balance.total_owing,
                    )
                )

        report.net_balance = report.total_owing - report.total_owed

        logger.info(
            f"User {user_id}: net {report.net_balance} "
            f"across {len(report.trip_balances)} trips with outstanding amounts"
        )

        return report
