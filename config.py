"""
Configuration and data loading/saving for TripSplit
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, field
from typing import List

from computations import SETTLE_EPS
from models import (
    AggregatedTransaction,
    DetailedTransaction,
    Expense,
    Member,
    MemberBalance,
    Session,
    SettlementReport,
    Transaction,
)
from session import new_session, next_id
from utils import app_dir

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"


@dataclass
class AppSettings:
    """User-level settings read from settings.json"""
    settle_eps: float = SETTLE_EPS
    currency: str = "円"
    default_members: List[str] = field(default_factory=list)


def load_settings(path: str) -> AppSettings:
    """Load settings from JSON file; missing file or keys fall back to defaults"""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("No settings file at %s, using defaults", path)
        return AppSettings()

    defaults = AppSettings()
    return AppSettings(
        settle_eps=float(data.get("settle_eps", defaults.settle_eps)),
        currency=str(data.get("currency", defaults.currency)),
        default_members=list(data.get("default_members", [])),
    )


def get_settings() -> AppSettings:
    """Settings from the application data directory"""
    return load_settings(os.path.join(app_dir(), SETTINGS_FILE))


def get_default_session(settings: AppSettings) -> Session:
    """Create a fresh session seeded with the configured members"""
    return new_session(settings.default_members)


# ---------- Snapshot (de)serialization ----------
def member_to_dict(m: Member) -> dict:
    return {"id": m.id, "name": m.name}


def expense_to_dict(e: Expense) -> dict:
    return {
        "id": e.id,
        "description": e.description,
        "amount": e.amount,
        "date": e.date,
        "paidById": e.paid_by_id,
        "paidForIds": list(e.paid_for_ids),
    }


def session_to_dict(session: Session) -> dict:
    """Convert Session object to dictionary for JSON serialization"""
    return {
        "members": [member_to_dict(m) for m in session.members],
        "expenses": [expense_to_dict(e) for e in session.expenses],
        "nextMemberId": session.next_member_id,
        "nextExpenseId": session.next_expense_id,
    }


def dict_to_session(d: dict) -> Session:
    """
    Convert dictionary from JSON to Session object.
    Id counters are rebuilt as max(id) + 1 (0 when empty). Unlike a plain
    rebuild, a larger stored counter wins so ids freed by removals are not
    handed out again.
    """
    members = tuple(Member(id=int(m["id"]), name=str(m["name"])) for m in d.get("members", []))
    expenses = tuple(
        Expense(
            id=int(e["id"]),
            description=str(e["description"]),
            amount=float(e["amount"]),
            date=str(e["date"]),
            paid_by_id=int(e["paidById"]),
            paid_for_ids=tuple(int(i) for i in e["paidForIds"]),
        ) for e in d.get("expenses", [])
    )

    return Session(
        members=members,
        expenses=expenses,
        next_member_id=max(next_id(members), int(d.get("nextMemberId", 0))),
        next_expense_id=max(next_id(expenses), int(d.get("nextExpenseId", 0))),
    )


def load_session_file(path: str) -> Session:
    """Load session snapshot from JSON file"""
    with open(path, "r", encoding="utf-8") as f:
        d = json.load(f)
    session = dict_to_session(d)
    logger.info("Loaded %d members and %d expenses from %s",
                len(session.members), len(session.expenses), path)
    return session


def save_session_file(session: Session, path: str) -> None:
    """Write session snapshot to JSON file"""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(session_to_dict(session), f, ensure_ascii=False, indent=2)
    logger.info("Saved session to %s", path)


# ---------- Engine output serialization ----------
def transaction_to_dict(t: Transaction) -> dict:
    return {"from": t.from_id, "to": t.to_id, "amount": t.amount}


def detailed_to_dict(d: DetailedTransaction) -> dict:
    return {
        "expenseId": d.expense_id,
        "expenseDescription": d.expense_description,
        "expenseDate": d.expense_date,
        "from": d.from_id,
        "to": d.to_id,
        "amount": d.amount,
    }


def aggregated_to_dict(a: AggregatedTransaction) -> dict:
    return {
        "from": a.from_id,
        "to": a.to_id,
        "totalAmount": a.total_amount,
        "details": [detailed_to_dict(d) for d in a.details],
    }


def member_balance_to_dict(mb: MemberBalance) -> dict:
    return {"id": mb.id, "name": mb.name, "balance": mb.balance, "isPaying": mb.is_paying}


def report_to_dict(report: SettlementReport) -> dict:
    """Plain structured form of a settlement report; balance keys become strings in JSON"""
    return {
        "balances": dict(report.balances),
        "transactions": [transaction_to_dict(t) for t in report.transactions],
        "detailed": [detailed_to_dict(d) for d in report.detailed],
        "aggregated": [aggregated_to_dict(a) for a in report.aggregated],
        "memberBalances": [member_balance_to_dict(mb) for mb in report.member_balances],
    }
