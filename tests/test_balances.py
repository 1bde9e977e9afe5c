"""Tests for balance calculation."""

from datetime import datetime
from decimal import Decimal

import pytest

from tripledger.domain.balances import calculate_balances
from tripledger.domain.entities import Expense, ExpenseSplit, MemberRole, SplitPolicy
from tripledger.domain.errors import NotFoundError, PermissionDenied


def make_expense(expense_id, paid_by, amount, splits, is_settlement=False):
    """Build an Expense with splits given as (member_id, amount) pairs."""
    return Expense(
        id=expense_id,
        trip_id=1,
        title=f"Expense {expense_id}",
        amount=Decimal(amount),
        currency="EUR",
        paid_by=paid_by,
        split_policy=SplitPolicy.CUSTOM,
        is_settlement=is_settlement,
        created_at=datetime(2024, 5, 1, 12, expense_id),
        splits=tuple(
            ExpenseSplit(
                id=expense_id * 10 + index,
                expense_id=expense_id,
                member_id=member_id,
                amount=Decimal(share),
                paid=member_id == paid_by,
            )
            for index, (member_id, share) in enumerate(splits)
        ),
    )


class TestCalculateBalances:
    """Tests for the pure balance calculation."""

    def test_empty_ledger(self):
        assert calculate_balances([]) == []

    def test_single_payer_equal_split(self):
        expenses = [make_expense(1, 1, "300.00", [(1, "100.00"), (2, "100.00"), (3, "100.00")])]

        balances = {b.member_id: b for b in calculate_balances(expenses)}

        assert balances[1].total_paid == Decimal("300.00")
        assert balances[1].total_owed == Decimal("100.00")
        assert balances[1].balance == Decimal("200.00")
        assert balances[2].balance == Decimal("-100.00")
        assert balances[3].balance == Decimal("-100.00")

    def test_results_ordered_by_member_id(self):
        expenses = [make_expense(1, 7, "20.00", [(5, "10.00"), (3, "10.00")])]

        assert [b.member_id for b in calculate_balances(expenses)] == [3, 5, 7]

    def test_balances_always_sum_to_zero(self):
        expenses = [
            make_expense(1, 1, "100.00", [(1, "33.34"), (2, "33.33"), (3, "33.33")]),
            make_expense(2, 2, "57.10", [(1, "20.00"), (3, "37.10")]),
            make_expense(3, 3, "12.00", [(2, "12.00")]),
            make_expense(4, 2, "10.00", [(2, "-10.00"), (1, "10.00")], is_settlement=True),
        ]

        balances = calculate_balances(expenses)

        assert sum(b.balance for b in balances) == Decimal("0")

    def test_settlements_only_count_in_net_settled(self):
        expenses = [
            make_expense(1, 1, "200.00", [(1, "100.00"), (2, "100.00")]),
            make_expense(2, 2, "40.00", [(2, "-40.00"), (1, "40.00")], is_settlement=True),
        ]

        balances = {b.member_id: b for b in calculate_balances(expenses)}

        assert balances[2].total_paid == Decimal("0")
        assert balances[2].total_owed == Decimal("100.00")
        assert balances[2].net_settled == Decimal("40.00")
        assert balances[2].balance == Decimal("-60.00")
        assert balances[1].net_settled == Decimal("-40.00")
        assert balances[1].balance == Decimal("60.00")

    def test_payer_outside_split_is_reported(self):
        expenses = [make_expense(1, 9, "30.00", [(1, "15.00"), (2, "15.00")])]

        balances = {b.member_id: b for b in calculate_balances(expenses)}

        assert balances[9].total_owed == Decimal("0")
        assert balances[9].balance == Decimal("30.00")

    def test_is_settled_within_tolerance(self):
        expenses = [make_expense(1, 1, "0.01", [(2, "0.01")])]

        assert all(b.is_settled for b in calculate_balances(expenses))


class TestBalanceService:
    """Tests for BalanceService against the database."""

    def test_compute_balances(self, balance_service, sample_trip, shared_dinner):
        ana, bruno, carla = sample_trip["ana"], sample_trip["bruno"], sample_trip["carla"]

        balances = balance_service.compute_balances(sample_trip["trip"].id, bruno.id)

        assert [(b.member_id, b.balance) for b in balances] == [
            (ana.id, Decimal("200.00")),
            (bruno.id, Decimal("-100.00")),
            (carla.id, Decimal("-100.00")),
        ]

    def test_recomputation_is_stable(self, balance_service, sample_trip, shared_dinner):
        trip_id, ana_id = sample_trip["trip"].id, sample_trip["ana"].id

        assert balance_service.compute_balances(trip_id, ana_id) == balance_service.compute_balances(
            trip_id, ana_id
        )

    def test_removed_member_still_counted(self, balance_service, trip_service, sample_trip, shared_dinner):
        ana, carla = sample_trip["ana"], sample_trip["carla"]
        trip_service.remove_member(carla.id, ana.id)

        balances = {b.member_id: b for b in balance_service.compute_balances(sample_trip["trip"].id, ana.id)}

        assert balances[carla.id].balance == Decimal("-100.00")

    def test_missing_trip(self, balance_service, sample_trip):
        with pytest.raises(NotFoundError, match="Trip 999 not found"):
            balance_service.compute_balances(999, sample_trip["ana"].id)

    def test_outsider_cannot_view(self, balance_service, trip_service, sample_trip, shared_dinner):
        _, stranger = trip_service.create_trip("Porto", "EUR", "Sam", "sam@example.com")

        with pytest.raises(PermissionDenied):
            balance_service.compute_balances(sample_trip["trip"].id, stranger.id)

    def test_viewer_can_view(self, balance_service, trip_service, sample_trip, shared_dinner):
        viewer = trip_service.add_member(
            sample_trip["trip"].id, sample_trip["ana"].id, "Vera", "vera@example.com", MemberRole.VIEWER
        )

        assert len(balance_service.compute_balances(sample_trip["trip"].id, viewer.id)) == 3
