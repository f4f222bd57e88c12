"""
Data models for TripSplit application
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Member:
    """Group member"""
    id: int
    name: str


@dataclass(frozen=True)
class Expense:
    """Single shared expense"""
    id: int
    description: str
    amount: float
    date: str  # YYYY-MM-DD
    paid_by_id: int
    paid_for_ids: Tuple[int, ...]  # beneficiaries; payer may or may not be one

    @property
    def share(self) -> float:
        """Per-head share charged to each beneficiary"""
        return self.amount / len(self.paid_for_ids)


@dataclass(frozen=True)
class Session:
    """Snapshot of one group's members and expenses plus id allocator state"""
    members: Tuple[Member, ...] = ()
    expenses: Tuple[Expense, ...] = ()
    next_member_id: int = 0
    next_expense_id: int = 0

    def member_by_id(self) -> Dict[int, Member]:
        return {m.id: m for m in self.members}


@dataclass
class Transaction:
    """Settling payment: from_id pays to_id"""
    from_id: int
    to_id: int
    amount: float


@dataclass
class DetailedTransaction:
    """What one beneficiary owes the payer for one expense"""
    expense_id: int
    expense_description: str
    expense_date: str
    from_id: int
    to_id: int
    amount: float


@dataclass
class AggregatedTransaction:
    """Detailed transactions for one (from, to) pair"""
    from_id: int
    to_id: int
    total_amount: float
    details: List[DetailedTransaction] = field(default_factory=list)


@dataclass
class MemberBalance:
    """Signed balance of one member for display"""
    id: int
    name: str
    balance: float
    is_paying: bool  # True when the member owes money


@dataclass
class MemberSummary:
    """Paid / consumed totals of one member"""
    id: int
    name: str
    paid: float
    consumed: float
    net: float  # paid - consumed; positive -> should receive


@dataclass
class SettlementReport:
    """All settlement views computed from one snapshot"""
    balances: Dict[int, float]
    transactions: List[Transaction]
    detailed: List[DetailedTransaction]
    aggregated: List[AggregatedTransaction]
    member_balances: List[MemberBalance]
