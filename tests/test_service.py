"""Tests for BalanceService layer."""

import logging
from decimal import Decimal

import pytest

from trip_split.config import Settings
from trip_split.exceptions import SettlementInvariantError
from trip_split.models import Expense, ExpenseSplit, Member, Trip
from trip_split.service import BalanceService


@pytest.fixture
def settings():
    """Create settings without touching the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def service(settings):
    """Create a BalanceService instance."""
    return BalanceService(settings)


@pytest.fixture
def beach_trip():
    """A weekend trip with two expenses among three members."""
    return Trip(
        id="t1",
        name="Beach weekend",
        members=[
            Member(id="u1", name="Alice"),
            Member(id="u2", name="Ben"),
            Member(id="u3", name="Cara"),
        ],
        expenses=[
            Expense(
                id="e1",
                title="Hotel",
                amount=Decimal("300.00"),
                paid_by="u1",
                splits=[
                    ExpenseSplit(user_id="u1", amount=Decimal("100.00")),
                    ExpenseSplit(user_id="u2", amount=Decimal("100.00")),
                    ExpenseSplit(user_id="u3", amount=Decimal("100.00")),
                ],
            ),
            Expense(
                id="e2",
                title="Dinner",
                amount=Decimal("90.00"),
                paid_by="u2",
                splits=[
                    ExpenseSplit(user_id="u1", amount=Decimal("45.00")),
                    ExpenseSplit(user_id="u3", amount=Decimal("45.00")),
                ],
            ),
        ],
    )


@pytest.fixture
def city_trip():
    """A second trip where only u1 and u4 travelled."""
    return Trip(
        id="t2",
        name="City break",
        members=[Member(id="u1", name="Alice"), Member(id="u4", name="Dan")],
        expenses=[
            Expense(
                id="e3",
                title="Tickets",
                amount=Decimal("80.00"),
                paid_by="u4",
                splits=[
                    ExpenseSplit(user_id="u1", amount=Decimal("40.00")),
                    ExpenseSplit(user_id="u4", amount=Decimal("40.00")),
                ],
            )
        ],
    )


@pytest.fixture
def empty_trip():
    """A trip with u1 on the roster but no expenses yet."""
    return Trip(id="t3", name="Planning", members=[Member(id="u1", name="Alice")])


class TestTripBalances:
    """Tests for per-trip balance methods."""

    def test_trip_balances(self, service, beach_trip):
        """Should compute one record per member."""
        balances = service.trip_balances(beach_trip)

        nets = {b.user_id: b.net_balance for b in balances}
        assert nets == {
            "u1": Decimal("55.00"),  # owing 200, owed 145
            "u2": Decimal("-10.00"),  # owing 90, owed 100
            "u3": Decimal("-145.00"),
        }

    def test_trip_detailed_balances(self, service, beach_trip):
        """Should expose who owes whom."""
        balances = {b.user_id: b for b in service.trip_detailed_balances(beach_trip)}

        cara = balances["u3"]
        assert [(e.user_name, e.amount) for e in cara.owes_to] == [
            ("Alice", Decimal("100.00")),
            ("Ben", Decimal("45.00")),
        ]

    def test_trip_expense_breakdowns(self, service, beach_trip):
        """Should list each member's debts by payer, largest first."""
        breakdowns = service.trip_expense_breakdowns(beach_trip)

        assert [(b.user_name, b.total_owed) for b in breakdowns] == [
            ("Cara", Decimal("145.00")),
            ("Ben", Decimal("100.00")),
            ("Alice", Decimal("45.00")),
        ]
        cara = breakdowns[0]
        assert [p.paid_by_name for p in cara.paid_by_breakdown] == ["Alice", "Ben"]
        assert cara.paid_by_breakdown[1].expenses[0].expense_title == "Dinner"

    def test_trip_settlements_settle_everyone(self, service, beach_trip):
        """Settlement plan should zero out the pairwise balances."""
        suggestions = service.trip_settlements(beach_trip)

        remaining = {
            b.user_id: b.net_balance for b in service.trip_detailed_balances(beach_trip)
        }
        for suggestion in suggestions:
            remaining[suggestion.from_user_id] += suggestion.amount
            remaining[suggestion.to_user_id] -= suggestion.amount

        assert all(value == 0 for value in remaining.values())
        assert len(suggestions) <= len(beach_trip.members) - 1

    def test_summarize_trip(self, service, beach_trip):
        """Summary should include totals, balances and settlements."""
        summary = service.summarize_trip(beach_trip)

        assert summary.trip_id == "t1"
        assert summary.trip_name == "Beach weekend"
        assert summary.total_expenses == Decimal("390.00")
        assert len(summary.balances) == 3
        assert summary.settlements == service.trip_settlements(beach_trip)

    def test_has_unsettled_amounts(self, service, beach_trip, empty_trip):
        """Trips with debtors are unsettled; empty trips are not."""
        assert service.has_unsettled_amounts(beach_trip)
        assert not service.has_unsettled_amounts(empty_trip)

    def test_warns_on_split_mismatch(self, service, beach_trip, caplog):
        """Should log a warning for expenses whose splits don't add up."""
        beach_trip.expenses[1].splits.pop()

        with caplog.at_level(logging.WARNING, logger="trip_split.service"):
            assert service.check_splits(beach_trip) == 1

        assert "expense e2" in caplog.text

    def test_detailed_balances_warn_on_split_mismatch(
        self, service, beach_trip, caplog
    ):
        """Pairwise balances and settlements should flag bad splits too."""
        beach_trip.expenses[1].splits.pop()

        with caplog.at_level(logging.WARNING, logger="trip_split.service"):
            service.trip_detailed_balances(beach_trip)

        assert "expense e2" in caplog.text

        caplog.clear()
        with caplog.at_level(logging.WARNING, logger="trip_split.service"):
            service.trip_settlements(beach_trip)

        assert "expense e2" in caplog.text


class TestSettlementStrictness:
    """Tests for the strict_settlement setting."""

    def test_strict_setting_passed_through(self, beach_trip, monkeypatch):
        """The service should forward strict_settlement to the calculator."""
        captured = {}

        def fake_suggest(balances, strict=True):
            captured["strict"] = strict
            return []

        monkeypatch.setattr("trip_split.service.suggest_settlements", fake_suggest)

        lenient = Settings(_env_file=None, strict_settlement=False)
        BalanceService(lenient).trip_settlements(beach_trip)

        assert captured["strict"] is False

    def test_strict_error_propagates(self, service, beach_trip, monkeypatch):
        """Invariant violations should reach the caller."""

        def broken(balances, strict=True):
            raise SettlementInvariantError("u1", "u3", Decimal("0"))

        monkeypatch.setattr("trip_split.service.suggest_settlements", broken)

        with pytest.raises(SettlementInvariantError):
            service.trip_settlements(beach_trip)


class TestUserBalance:
    """Tests for the cross-trip user report."""

    def test_aggregates_member_trips(self, service, beach_trip, city_trip):
        """Totals should add up across every trip the user is on."""
        report = service.user_balance("u1", [beach_trip, city_trip])

        assert report.user_id == "u1"
        assert report.total_owed == Decimal("185.00")  # 100 + 45 + 40
        assert report.total_owing == Decimal("200.00")
        assert report.net_balance == Decimal("15.00")
        assert [t.trip_id for t in report.trip_balances] == ["t1", "t2"]

    def test_skips_trips_without_membership(self, service, beach_trip, city_trip):
        """Trips the user isn't on shouldn't count."""
        report = service.user_balance("u4", [beach_trip, city_trip])

        assert [t.trip_id for t in report.trip_balances] == ["t2"]
        assert report.total_owing == Decimal("40.00")
        assert report.total_owed == Decimal("40.00")
        assert report.net_balance == Decimal("0")

    def test_omits_trips_without_outstanding_amounts(
        self, service, beach_trip, empty_trip
    ):
        """Trips with nothing owed either way are left out of the breakdown."""
        report = service.user_balance("u1", [empty_trip, beach_trip])

        assert [t.trip_id for t in report.trip_balances] == ["t1"]

    def test_unknown_user(self, service, beach_trip):
        """A user on no trips gets an all-zero report."""
        report = service.user_balance("nobody", [beach_trip])

        assert report.total_owed == report.total_owing == report.net_balance == 0
        assert report.trip_balances == []
