import pytest

from models import Expense, Member


def make_expense(id, amount, paid_by_id, paid_for_ids, date="2025-01-01", description=None):
    return Expense(
        id=id,
        description=description or f"expense {id}",
        amount=float(amount),
        date=date,
        paid_by_id=paid_by_id,
        paid_for_ids=tuple(paid_for_ids),
    )


@pytest.fixture
def alice_bob():
    return (Member(0, "Alice"), Member(1, "Bob"))


@pytest.fixture
def abc():
    return (Member(0, "A"), Member(1, "B"), Member(2, "C"))


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep app_dir() inside the test's temp directory"""
    home = tmp_path / "home"
    monkeypatch.setenv("TRIPSPLIT_HOME", str(home))
    return home
