"""Core balance logic: who owes whom within a set of shared expenses.

All functions here are pure. They read the caller's models, build fresh
output models, and never mutate their inputs.
"""

import logging
from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from .exceptions import SettlementInvariantError
from .models import (
    BalanceRecord,
    BalanceStatus,
    CounterpartyAmount,
    DetailedBalanceRecord,
    Expense,
    ExpenseShare,
    Member,
    MemberExpenseBreakdown,
    PayerBreakdown,
    SettlementSuggestion,
    SplitDiscrepancy,
    UserTotalBalance,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
CENT = Decimal("0.01")


def round_currency(amount: Decimal) -> Decimal:
    """
    Round a currency amount to 2 decimal places.
    Uses ROUND_HALF_UP for consistency.

    Args:
        amount: Amount as Decimal

    Returns:
        Amount quantized to cents
    """
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal | int | float | str) -> str:
    """
    Format an amount for display with two decimals and thousands separators.

    Strings and floats are converted through ``str`` so that "12.5" and 12.5
    both format as "12.50".
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return f"{round_currency(value):,.2f}"


def balance_status(net_balance: Decimal, currency_symbol: str = "₱") -> BalanceStatus:
    """Describe a net balance from the member's point of view."""
    if net_balance > 0:
        return BalanceStatus(
            text=f"You're owed {currency_symbol} {format_currency(net_balance)}",
            tone="positive",
        )
    if net_balance < 0:
        return BalanceStatus(
            text=f"You owe {currency_symbol} {format_currency(abs(net_balance))}",
            tone="negative",
        )
    return BalanceStatus(text="All settled up!", tone="settled")


def find_split_discrepancies(expenses: Iterable[Expense]) -> list[SplitDiscrepancy]:
    """
    Find expenses whose splits don't add up to the expense amount.

    Balances are still computed for such expenses; the difference simply
    shows up in the members' totals. This is a reporting aid only.
    """
    discrepancies = []
    for expense in expenses:
        split_total = expense.split_total()
        if split_total != expense.amount:
            discrepancies.append(
                SplitDiscrepancy(
                    expense_id=expense.id,
                    expense_amount=expense.amount,
                    split_total=split_total,
                    difference=expense.amount - split_total,
                )
            )
    return discrepancies


def compute_balances(
    expenses: Iterable[Expense], members: Iterable[Member]
) -> list[BalanceRecord]:
    """
    Compute one balance record per member.

    Steps:
    1. Start every member at zero
    2. Credit each payer with the full expense amount
    3. Charge each split member their share
    4. Remove the payer's own share from what they are owed back
    5. net_balance = total_owing - total_owed

    Payers and split members that aren't in ``members`` are ignored.
    Negative amounts and repeated splits are accumulated as given.

    Args:
        expenses: Expenses with their splits
        members: Roster of members to report on

    Returns:
        Balance records in roster order
    """
    roster = list(members)
    owed: dict[str, Decimal] = {member.id: ZERO for member in roster}
    owing: dict[str, Decimal] = {member.id: ZERO for member in roster}

    for expense in expenses:
        payer_id = expense.paid_by
        if payer_id in owing:
            owing[payer_id] += expense.amount

        for split in expense.splits:
            if split.user_id not in owed:
                continue
            owed[split.user_id] += split.amount
            # A payer doesn't owe themselves
            if split.user_id == payer_id:
                owing[split.user_id] -= split.amount

    records = [
        BalanceRecord(
            user_id=member.id,
            user_name=member.name,
            total_owed=owed[member.id],
            total_owing=owing[member.id],
            net_balance=owing[member.id] - owed[member.id],
        )
        for member in roster
    ]

    logger.debug(f"Computed balances for {len(records)} members")

    return records


def compute_user_total_balance(
    user_id: str, expenses: Iterable[Expense]
) -> UserTotalBalance:
    """
    Compute a single user's aggregate position over a flat expense list.

    Uses the same accumulation rule as compute_balances, so expenses from
    several trips can be combined without building a roster for each.
    """
    total_owed = ZERO
    total_owing = ZERO

    for expense in expenses:
        paid_by_user = expense.paid_by == user_id
        if paid_by_user:
            total_owing += expense.amount

        for split in expense.splits:
            if split.user_id != user_id:
                continue
            total_owed += split.amount
            if paid_by_user:
                total_owing -= split.amount

    return UserTotalBalance(
        total_owed=total_owed,
        total_owing=total_owing,
        net_balance=total_owing - total_owed,
    )


def compute_detailed_balances(
    expenses: Iterable[Expense], members: Iterable[Member]
) -> list[DetailedBalanceRecord]:
    """
    Compute balances with a pairwise breakdown of who owes whom.

    Every split whose member is not the payer becomes a directed debt from the
    split member to the payer. Debts between the same ordered pair are summed;
    debts in opposite directions are kept separate.

    Totals only count these cross-member debts. Self-shares are left out of
    both totals, so total_owed here differs from compute_balances whenever a
    payer splits an expense with themselves.

    Expenses paid by someone outside the roster are skipped, as are splits
    for members outside the roster.

    Args:
        expenses: Expenses with their splits
        members: Roster of members to report on

    Returns:
        Detailed balance records in roster order
    """
    roster = list(members)
    names = {member.id: member.name for member in roster}
    owed = {member.id: ZERO for member in roster}
    owing = {member.id: ZERO for member in roster}
    # debtor -> creditor -> amount, in first-seen order
    owes_to: dict[str, dict[str, Decimal]] = {member.id: {} for member in roster}
    # creditor -> debtor -> amount, in first-seen order
    owed_by: dict[str, dict[str, Decimal]] = {member.id: {} for member in roster}

    for expense in expenses:
        payer_id = expense.paid_by
        if payer_id not in names:
            logger.debug(
                f"Skipping expense {expense.id}: payer {payer_id} not in roster"
            )
            continue

        for split in expense.splits:
            debtor_id = split.user_id
            if debtor_id not in names or debtor_id == payer_id:
                continue

            owed[debtor_id] += split.amount
            owing[payer_id] += split.amount

            debts = owes_to[debtor_id]
            debts[payer_id] = debts.get(payer_id, ZERO) + split.amount
            credits = owed_by[payer_id]
            credits[debtor_id] = credits.get(debtor_id, ZERO) + split.amount

    return [
        DetailedBalanceRecord(
            user_id=member.id,
            user_name=member.name,
            total_owed=owed[member.id],
            total_owing=owing[member.id],
            net_balance=owing[member.id] - owed[member.id],
            owes_to=[
                CounterpartyAmount(user_id=uid, user_name=names[uid], amount=amount)
                for uid, amount in owes_to[member.id].items()
            ],
            owed_by=[
                CounterpartyAmount(user_id=uid, user_name=names[uid], amount=amount)
                for uid, amount in owed_by[member.id].items()
            ],
        )
        for member in roster
    ]


def compute_payer_breakdowns(
    expenses: Iterable[Expense], members: Iterable[Member]
) -> list[MemberExpenseBreakdown]:
    """
    Group each member's debts by payer, listing the expenses behind them.

    Steps:
    1. For each member, take the expenses someone else paid where the member
       has a split (several splits for the member are added together)
    2. Group those shares by payer and total them
    3. Sort payers by total, largest first
    4. Sort members by total owed, largest first

    Both sorts are stable, so ties keep expense order and roster order.
    A payer outside the roster is still listed, under their id.

    Args:
        expenses: Expenses with their splits
        members: Roster of members to report on

    Returns:
        One breakdown per member
    """
    roster = list(members)
    expense_list = list(expenses)
    names = {member.id: member.name for member in roster}

    breakdowns = []
    for member in roster:
        by_payer: dict[str, PayerBreakdown] = {}

        for expense in expense_list:
            if expense.paid_by == member.id:
                continue
            shares = [s.amount for s in expense.splits if s.user_id == member.id]
            if not shares:
                continue

            share = sum(shares, ZERO)
            entry = by_payer.get(expense.paid_by)
            if entry is None:
                entry = PayerBreakdown(
                    paid_by=expense.paid_by,
                    paid_by_name=names.get(expense.paid_by, expense.paid_by),
                )
                by_payer[expense.paid_by] = entry

            entry.total_paid_for_user += share
            entry.expenses.append(
                ExpenseShare(
                    expense_id=expense.id,
                    expense_title=expense.title,
                    expense_amount=expense.amount,
                    user_share=share,
                )
            )

        payers = sorted(
            by_payer.values(), key=lambda p: p.total_paid_for_user, reverse=True
        )
        breakdowns.append(
            MemberExpenseBreakdown(
                user_id=member.id,
                user_name=member.name,
                total_owed=sum((p.total_paid_for_user for p in payers), ZERO),
                paid_by_breakdown=payers,
            )
        )

    return sorted(breakdowns, key=lambda b: b.total_owed, reverse=True)


def suggest_settlements(
    balances: Iterable[BalanceRecord], strict: bool = True
) -> list[SettlementSuggestion]:
    """
    Suggest transfers that settle a set of net balances.

    Greedy matching: creditors are sorted largest first, debtors most negative
    first (ties keep input order). The current debtor pays the current creditor
    as much as possible, and whoever reaches zero is moved past. This is a
    heuristic and not guaranteed to find the fewest possible transfers, but it
    never produces more than n - 1 of them.

    The input records are not modified.

    Args:
        balances: Balance records (net_balance is the only field consulted)
        strict: Raise instead of stopping early if a non-positive transfer
            is ever computed

    Returns:
        Settlement suggestions in the order they were generated

    Raises:
        SettlementInvariantError: If strict and a transfer amount is <= 0
    """
    records = list(balances)

    # [record, remaining balance] working copies
    creditors = sorted(
        ([b, b.net_balance] for b in records if b.net_balance > 0),
        key=lambda entry: entry[1],
        reverse=True,
    )
    debtors = sorted(
        ([b, b.net_balance] for b in records if b.net_balance < 0),
        key=lambda entry: entry[1],
    )

    suggestions = []
    creditor_index = 0
    debtor_index = 0

    while creditor_index < len(creditors) and debtor_index < len(debtors):
        creditor = creditors[creditor_index]
        debtor = debtors[debtor_index]

        transfer = min(creditor[1], abs(debtor[1]))

        if transfer <= 0:
            if strict:
                raise SettlementInvariantError(
                    creditor_id=creditor[0].user_id,
                    debtor_id=debtor[0].user_id,
                    amount=transfer,
                )
            logger.error(
                f"Stopping settlement early: non-positive transfer {transfer} "
                f"from {debtor[0].user_id} to {creditor[0].user_id}"
            )
            break

        suggestions.append(
            SettlementSuggestion(
                from_user_id=debtor[0].user_id,
                from_user_name=debtor[0].user_name,
                to_user_id=creditor[0].user_id,
                to_user_name=creditor[0].user_name,
                amount=transfer,
            )
        )

        creditor[1] -= transfer
        debtor[1] += transfer

        if creditor[1] == 0:
            creditor_index += 1
        if debtor[1] == 0:
            debtor_index += 1

    logger.debug(
        f"Suggested {len(suggestions)} transfers for "
        f"{len(creditors)} creditors and {len(debtors)} debtors"
    )

    return suggestions


def has_unsettled_amounts(balances: Iterable[BalanceRecord]) -> bool:
    """Check whether any member still owes money."""
    return any(balance.net_balance < 0 for balance in balances)
