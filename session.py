"""
Session operations for TripSplit.

A Session is a frozen snapshot. Each operation validates its input and
returns a new Session; the one passed in is left untouched.
"""
from __future__ import annotations
import math
from dataclasses import replace
from typing import Iterable, Sequence

from models import Expense, Member, Session
from utils import parse_date, safe_float


class ValidationError(ValueError):
    """User input rejected before it reaches the settlement engine"""


def next_id(items: Sequence) -> int:
    """max(existing ids) + 1, or 0 for an empty list"""
    return max((x.id for x in items), default=-1) + 1


def new_session(member_names: Iterable[str] = ()) -> Session:
    """Create an empty session, optionally seeded with members"""
    s = Session()
    for name in member_names:
        s = add_member(s, name)
    return s


def add_member(session: Session, name: str) -> Session:
    """Add a member under the next free id"""
    name = (name or "").strip()
    if not name:
        raise ValidationError("Member name is required.")
    if any(m.name == name for m in session.members):
        raise ValidationError(f"A member named '{name}' already exists.")

    member = Member(id=session.next_member_id, name=name)
    return replace(
        session,
        members=session.members + (member,),
        next_member_id=session.next_member_id + 1,
    )


def remove_member(session: Session, member_id: int) -> Session:
    """Remove a member and every expense it paid for or benefited from"""
    if not any(m.id == member_id for m in session.members):
        raise ValidationError(f"Unknown member id {member_id}.")

    return replace(
        session,
        members=tuple(m for m in session.members if m.id != member_id),
        expenses=tuple(
            e for e in session.expenses
            if e.paid_by_id != member_id and member_id not in e.paid_for_ids
        ),
    )


def validate_expense(
    session: Session,
    description: str,
    amount,
    date: str,
    paid_by_id: int,
    paid_for_ids: Iterable[int],
) -> Expense:
    """
    Check expense fields against the session's members and build an Expense
    with a placeholder id of -1.
    """
    description = (description or "").strip()
    if isinstance(amount, bool):
        amt = None
    else:
        amt = amount if isinstance(amount, (int, float)) else safe_float(amount, None)
    date = (date or "").strip()
    ids = list(dict.fromkeys(paid_for_ids or ()))

    if not description or amt is None or not date or paid_by_id is None or not ids:
        raise ValidationError("Please fill in every field correctly.")
    if not math.isfinite(amt) or amt <= 0:
        raise ValidationError("Amount must be greater than 0.")
    try:
        parse_date(date)
    except ValueError:
        raise ValidationError("Date must be YYYY-MM-DD.") from None

    known = {m.id for m in session.members}
    if paid_by_id not in known:
        raise ValidationError(f"Unknown payer id {paid_by_id}.")
    unknown = [i for i in ids if i not in known]
    if unknown:
        raise ValidationError(f"Unknown member ids: {', '.join(str(i) for i in unknown)}.")

    return Expense(
        id=-1,
        description=description,
        amount=float(amt),
        date=date,
        paid_by_id=paid_by_id,
        paid_for_ids=tuple(ids),
    )


def add_expense(
    session: Session,
    description: str,
    amount,
    date: str,
    paid_by_id: int,
    paid_for_ids: Iterable[int],
) -> Session:
    """Validate and append an expense under the next free id"""
    e = validate_expense(session, description, amount, date, paid_by_id, paid_for_ids)
    e = replace(e, id=session.next_expense_id)
    return replace(
        session,
        expenses=session.expenses + (e,),
        next_expense_id=session.next_expense_id + 1,
    )


def remove_expense(session: Session, expense_id: int) -> Session:
    """Remove one expense; nothing else changes"""
    if not any(e.id == expense_id for e in session.expenses):
        raise ValidationError(f"Unknown expense id {expense_id}.")
    return replace(session, expenses=tuple(e for e in session.expenses if e.id != expense_id))


def replace_expenses(session: Session, expenses: Iterable[Expense]) -> Session:
    """
    Swap in a whole expense list (e.g. from a CSV import).
    The id counter never moves backwards so removed ids stay retired.
    """
    expenses = tuple(expenses)
    for e in expenses:
        validate_expense(session, e.description, e.amount, e.date, e.paid_by_id, e.paid_for_ids)
    ids = [e.id for e in expenses]
    if len(set(ids)) != len(ids):
        raise ValidationError("Expense ids must be unique.")
    return replace(
        session,
        expenses=expenses,
        next_expense_id=max(session.next_expense_id, next_id(expenses)),
    )
