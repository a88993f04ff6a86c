"""TripSplit - Work out who owes whom for shared trip expenses."""

__version__ = "0.1.0"

from .calculator import (
    compute_balances,
    compute_detailed_balances,
    compute_payer_breakdowns,
    compute_user_total_balance,
    format_currency,
    suggest_settlements,
)
from .config import Settings, load_settings
from .loader import load_ledger
from .models import (
    BalanceRecord,
    DetailedBalanceRecord,
    Expense,
    ExpenseSplit,
    Ledger,
    Member,
    SettlementSuggestion,
    Trip,
    UserTotalBalance,
)
from .service import BalanceService

__all__ = [
    "Settings",
    "load_settings",
    "load_ledger",
    "BalanceRecord",
    "DetailedBalanceRecord",
    "Expense",
    "ExpenseSplit",
    "Ledger",
    "Member",
    "SettlementSuggestion",
    "Trip",
    "UserTotalBalance",
    "compute_balances",
    "compute_detailed_balances",
    "compute_payer_breakdowns",
    "compute_user_total_balance",
    "format_currency",
    "suggest_settlements",
    "BalanceService",
]
