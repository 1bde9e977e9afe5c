"""Greedy debt resolution over member balances."""

from decimal import Decimal
from typing import Sequence

from tripledger.domain.entities import Balance, Debt, TOLERANCE


def resolve_debts(balances: Sequence[Balance]) -> list[Debt]:
    """Turn net balances into a list of payments that settles everyone.

    Members owing more than the tolerance are debtors, members owed more than
    it are creditors; anyone in between is treated as settled. Each debtor,
    in input order, draws from the creditors in input order until their debt
    is covered. The result zeroes every balance but is not guaranteed to use
    the fewest possible payments.

    Args:
        balances: Member balances, for example from BalanceService

    Returns:
        Debts in the order they were matched
    """
    debtors = [(b.member_id, -b.balance) for b in balances if b.balance < -TOLERANCE]
    creditors = [[b.member_id, b.balance] for b in balances if b.balance > TOLERANCE]

    debts: list[Debt] = []
    creditor_index = 0
    for debtor_id, remaining in debtors:
        while remaining > TOLERANCE and creditor_index < len(creditors):
            creditor = creditors[creditor_index]
            draw = min(remaining, creditor[1])
            if draw > TOLERANCE:
                debts.append(Debt(from_member=debtor_id, to_member=creditor[0], amount=draw))
            remaining -= draw
            creditor[1] -= draw
            if creditor[1] <= TOLERANCE:
                creditor_index += 1
    return debts


def outstanding_debt(debts: Sequence[Debt], from_member: int, to_member: int) -> Decimal:
    """Total currently owed by one member to another."""
    return sum(
        (d.amount for d in debts if d.from_member == from_member and d.to_member == to_member),
        Decimal("0.00"),
    )
