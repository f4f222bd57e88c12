import pytest

from computations import compute_balances, compute_settlement
from models import Member, Session
from session import (
    ValidationError,
    add_expense,
    add_member,
    new_session,
    remove_expense,
    remove_member,
    replace_expenses,
)
from conftest import make_expense


@pytest.fixture
def trip():
    s = new_session(["Alice", "Bob", "Carol"])
    s = add_expense(s, "Hotel", 3000, "2025-01-01", 0, [0, 1, 2])
    s = add_expense(s, "Dinner", 1200, "2025-01-02", 1, [0, 1])
    s = add_expense(s, "Taxi", 900, "2025-01-02", 0, [0, 2])
    return s


def test_members_get_sequential_ids():
    s = new_session(["Alice", "Bob"])

    assert s.members == (Member(0, "Alice"), Member(1, "Bob"))
    assert s.next_member_id == 2


def test_add_member_strips_name():
    s = add_member(Session(), "  Alice ")

    assert s.members[0].name == "Alice"


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_member_requires_name(name):
    with pytest.raises(ValidationError):
        add_member(Session(), name)


def test_add_member_rejects_duplicate_name():
    s = new_session(["Alice"])

    with pytest.raises(ValidationError, match="already exists"):
        add_member(s, "Alice")
    # names are case-sensitive
    assert add_member(s, "alice").members[-1].name == "alice"


def test_removed_member_id_is_not_reused():
    s = new_session(["Alice", "Bob"])
    s = remove_member(s, 1)
    s = add_member(s, "Bob")

    assert s.members == (Member(0, "Alice"), Member(2, "Bob"))


def test_operations_do_not_mutate_input(trip):
    before = trip

    add_member(trip, "Dave")
    remove_member(trip, 0)
    add_expense(trip, "Snacks", 300, "2025-01-03", 2, [2])
    remove_expense(trip, 0)

    assert trip is before
    assert len(trip.members) == 3
    assert len(trip.expenses) == 3


def test_remove_member_cascades_to_expenses(trip):
    # Carol is a beneficiary of the hotel and the taxi
    s = remove_member(trip, 2)

    assert [e.description for e in s.expenses] == ["Dinner"]
    assert [m.name for m in s.members] == ["Alice", "Bob"]

    known = {m.id for m in s.members}
    for e in s.expenses:
        assert e.paid_by_id in known
        assert set(e.paid_for_ids) <= known
    balances = compute_balances(s.members, s.expenses)
    assert balances == pytest.approx({0: -600.0, 1: 600.0})
    assert [(t.from_id, t.to_id) for t in compute_settlement(s.members, s.expenses)] == [(0, 1)]


def test_remove_member_cascades_when_payer(trip):
    s = remove_member(trip, 1)

    # Bob shared the hotel and paid for dinner
    assert [e.description for e in s.expenses] == ["Taxi"]


def test_remove_unknown_member(trip):
    with pytest.raises(ValidationError):
        remove_member(trip, 42)


def test_add_expense_allocates_ids(trip):
    assert [e.id for e in trip.expenses] == [0, 1, 2]
    assert trip.next_expense_id == 3

    s = remove_expense(trip, 2)
    s = add_expense(s, "Museum", 600, "2025-01-03", 2, [0, 1, 2])

    assert [e.id for e in s.expenses] == [0, 1, 3]


def test_add_expense_accepts_numeric_string():
    s = new_session(["Alice", "Bob"])
    s = add_expense(s, " Lunch ", "1500", "2025-01-01", 0, [0, 1, 1])

    e = s.expenses[0]
    assert e.amount == 1500.0
    assert e.description == "Lunch"
    assert e.paid_for_ids == (0, 1)


@pytest.mark.parametrize("kwargs, message", [
    (dict(description=""), "every field"),
    (dict(amount="abc"), "every field"),
    (dict(amount=0), "greater than 0"),
    (dict(amount=-10), "greater than 0"),
    (dict(amount=float("nan")), "greater than 0"),
    (dict(amount=True), "every field"),
    (dict(date=""), "every field"),
    (dict(date="2025/01/01"), "YYYY-MM-DD"),
    (dict(paid_for_ids=[]), "every field"),
    (dict(paid_by_id=7), "Unknown payer"),
    (dict(paid_for_ids=[0, 8]), "Unknown member"),
])
def test_add_expense_validation(kwargs, message):
    s = new_session(["Alice", "Bob"])
    fields = dict(description="Lunch", amount=100, date="2025-01-01", paid_by_id=0, paid_for_ids=[0, 1])
    fields.update(kwargs)

    with pytest.raises(ValidationError, match=message):
        add_expense(s, **fields)


def test_remove_expense_has_no_cascade(trip):
    s = remove_expense(trip, 0)

    assert s.members == trip.members
    assert [e.id for e in s.expenses] == [1, 2]


def test_remove_unknown_expense(trip):
    with pytest.raises(ValidationError):
        remove_expense(trip, 99)


def test_replace_expenses_keeps_counter_monotonic(trip):
    s = replace_expenses(trip, [make_expense(0, 100, 0, [0, 1])])

    assert len(s.expenses) == 1
    assert s.next_expense_id == 3

    s = replace_expenses(trip, [make_expense(10, 100, 0, [0, 1])])
    assert s.next_expense_id == 11


def test_replace_expenses_validates(trip):
    with pytest.raises(ValidationError):
        replace_expenses(trip, [make_expense(0, 100, 0, [5])])
    with pytest.raises(ValidationError, match="unique"):
        replace_expenses(trip, [make_expense(0, 100, 0, [0]), make_expense(0, 50, 1, [1])])
