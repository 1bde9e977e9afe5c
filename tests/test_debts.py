"""Tests for debt resolution."""

from decimal import Decimal

from tripledger.domain.debts import outstanding_debt, resolve_debts
from tripledger.domain.entities import Balance, Debt


def balance(member_id, amount):
    amount = Decimal(amount)
    return Balance(member_id=member_id, total_paid=Decimal("0"), total_owed=Decimal("0"), balance=amount)


def test_no_balances_no_debts():
    assert resolve_debts([]) == []


def test_single_creditor_two_debtors():
    debts = resolve_debts([balance(1, "200.00"), balance(2, "-100.00"), balance(3, "-100.00")])

    assert debts == [
        Debt(from_member=2, to_member=1, amount=Decimal("100.00")),
        Debt(from_member=3, to_member=1, amount=Decimal("100.00")),
    ]


def test_debtor_spans_several_creditors_in_input_order():
    debts = resolve_debts([balance(1, "30.00"), balance(2, "70.00"), balance(3, "-100.00")])

    assert debts == [
        Debt(from_member=3, to_member=1, amount=Decimal("30.00")),
        Debt(from_member=3, to_member=2, amount=Decimal("70.00")),
    ]


def test_creditor_shared_by_debtors():
    debts = resolve_debts(
        [balance(1, "-50.00"), balance(2, "80.00"), balance(3, "-60.00"), balance(4, "30.00")]
    )

    assert debts == [
        Debt(from_member=1, to_member=2, amount=Decimal("50.00")),
        Debt(from_member=3, to_member=2, amount=Decimal("30.00")),
        Debt(from_member=3, to_member=4, amount=Decimal("30.00")),
    ]


def test_balances_within_tolerance_are_settled():
    assert resolve_debts([balance(1, "0.01"), balance(2, "-0.01")]) == []


def test_debts_zero_every_balance():
    balances = [
        balance(1, "123.45"),
        balance(2, "-23.40"),
        balance(3, "-50.05"),
        balance(4, "10.00"),
        balance(5, "-60.00"),
    ]

    net = {b.member_id: b.balance for b in balances}
    for debt in resolve_debts(balances):
        assert debt.amount > 0
        net[debt.from_member] += debt.amount
        net[debt.to_member] -= debt.amount

    assert all(abs(value) <= Decimal("0.01") for value in net.values())


def test_outstanding_debt():
    debts = [
        Debt(from_member=2, to_member=1, amount=Decimal("60.00")),
        Debt(from_member=3, to_member=1, amount=Decimal("100.00")),
    ]

    assert outstanding_debt(debts, 2, 1) == Decimal("60.00")
    assert outstanding_debt(debts, 1, 2) == Decimal("0.00")
