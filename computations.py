"""
Settlement engine for TripSplit.

Every function here is pure: members and expenses are read, never modified,
and every view is recomputed from scratch on each call.
"""
from __future__ import annotations
from typing import Dict, List, Sequence, Tuple

from models import (
    AggregatedTransaction,
    DetailedTransaction,
    Expense,
    Member,
    MemberBalance,
    MemberSummary,
    SettlementReport,
    Transaction,
)
from utils import parse_date

# Balances within this distance of zero count as settled.
SETTLE_EPS = 0.01


def compute_balances(members: Sequence[Member], expenses: Sequence[Expense]) -> Dict[int, float]:
    """
    Compute net balance per member id.
    Positive -> is owed money; negative -> owes money.

    Keys follow member order. A payer id that is not a member is appended
    after the members (a "ghost" entry); beneficiary ids that are not members
    are skipped.
    """
    balances = {m.id: 0.0 for m in members}

    for e in expenses:
        balances[e.paid_by_id] = balances.get(e.paid_by_id, 0.0) + float(e.amount)
        share = e.share
        for member_id in e.paid_for_ids:
            if member_id in balances:
                balances[member_id] -= share

    return balances


def compute_transfers(balances: Dict[int, float], eps: float = SETTLE_EPS) -> List[Transaction]:
    """
    Compute transfers to settle debts.
    Greedy settlement: debtors pay creditors in the order they appear in
    ``balances``. Nothing is sorted, so the result depends on that order.

    At most len(debtors) + len(creditors) - 1 transfers are produced. This is
    a two-pointer heuristic and does not find the globally smallest number of
    transfers for every topology.
    """
    creditors = [[p, v] for p, v in balances.items() if v > eps]
    debtors = [[p, -v] for p, v in balances.items() if v < -eps]

    transfers = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]
        x = min(debtor[1], creditor[1])
        if x > eps:
            transfers.append(Transaction(from_id=debtor[0], to_id=creditor[0], amount=x))
            debtor[1] -= x
            creditor[1] -= x
        if debtor[1] < eps:
            i += 1
        if creditor[1] < eps:
            j += 1

    return transfers


def compute_settlement(
    members: Sequence[Member],
    expenses: Sequence[Expense],
    eps: float = SETTLE_EPS
) -> List[Transaction]:
    """Minimal settling payments for a group; empty with < 2 members or no expenses"""
    if not expenses or len(members) < 2:
        return []
    return compute_transfers(compute_balances(members, expenses), eps)


def compute_detailed_transactions(expenses: Sequence[Expense]) -> List[DetailedTransaction]:
    """
    One row per (expense, beneficiary) where the beneficiary is not the payer.
    Sorted by expense date, newest first; rows of the same date keep their
    original order.
    """
    rows = []
    for e in expenses:
        share = e.share
        for member_id in e.paid_for_ids:
            if member_id == e.paid_by_id:
                continue
            rows.append(DetailedTransaction(
                expense_id=e.id,
                expense_description=e.description,
                expense_date=e.date,
                from_id=member_id,
                to_id=e.paid_by_id,
                amount=share,
            ))

    rows.sort(key=lambda d: parse_date(d.expense_date), reverse=True)
    return rows


def aggregate_detailed_transactions(detailed: Sequence[DetailedTransaction]) -> List[AggregatedTransaction]:
    """Group detailed rows by ordered (from, to) pair in first-seen order, without netting"""
    groups: Dict[tuple, AggregatedTransaction] = {}
    for d in detailed:
        key = (d.from_id, d.to_id)
        agg = groups.get(key)
        if agg is None:
            groups[key] = AggregatedTransaction(d.from_id, d.to_id, d.amount, [d])
        else:
            agg.total_amount += d.amount
            agg.details.append(d)
    return list(groups.values())


def compute_member_balances(
    members: Sequence[Member],
    expenses: Sequence[Expense],
    eps: float = SETTLE_EPS
) -> List[MemberBalance]:
    """Signed balances of unsettled members, in member order"""
    if not expenses or len(members) < 2:
        return []

    balances = compute_balances(members, expenses)
    out = []
    for m in members:
        b = balances.get(m.id, 0.0)
        if abs(b) > eps:
            out.append(MemberBalance(id=m.id, name=m.name, balance=b, is_paying=b < -eps))
    return out


def compute_summary(members: Sequence[Member], expenses: Sequence[Expense]) -> List[MemberSummary]:
    """
    Compute paid / consumed totals for each member.
    Ids that are not members are ignored.
    """
    paid = {m.id: 0.0 for m in members}
    consumed = {m.id: 0.0 for m in members}

    for e in expenses:
        if e.paid_by_id in paid:
            paid[e.paid_by_id] += float(e.amount)
        share = e.share
        for member_id in e.paid_for_ids:
            if member_id in consumed:
                consumed[member_id] += share

    return [
        MemberSummary(
            id=m.id,
            name=m.name,
            paid=paid[m.id],
            consumed=consumed[m.id],
            net=paid[m.id] - consumed[m.id],
        ) for m in members
    ]


def compute_report(
    members: Sequence[Member],
    expenses: Sequence[Expense],
    eps: float = SETTLE_EPS
) -> SettlementReport:
    """Compute every settlement view for one snapshot"""
    detailed = compute_detailed_transactions(expenses)
    return SettlementReport(
        balances=compute_balances(members, expenses),
        transactions=compute_settlement(members, expenses, eps),
        detailed=detailed,
        aggregated=aggregate_detailed_transactions(detailed),
        member_balances=compute_member_balances(members, expenses, eps),
    )


def sort_expenses_for_display(expenses: Sequence[Expense]) -> List[Expense]:
    """Newest first"""
    return sorted(expenses, key=lambda e: parse_date(e.date), reverse=True)


def expense_log(members: Sequence[Member], expenses: Sequence[Expense]) -> List[Tuple[Expense, str, List[str]]]:
    """
    Expenses newest first with payer and beneficiary names.
    Expenses whose payer is not a member are left out, as are beneficiary
    ids that are not members.
    """
    names = {m.id: m.name for m in members}
    return [
        (e, names[e.paid_by_id], [names[i] for i in e.paid_for_ids if i in names])
        for e in sort_expenses_for_display(expenses)
        if e.paid_by_id in names
    ]
