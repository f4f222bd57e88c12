import json

import pytest

from computations import compute_report
from config import (
    AppSettings,
    dict_to_session,
    get_default_session,
    get_settings,
    load_session_file,
    load_settings,
    report_to_dict,
    save_session_file,
    session_to_dict,
)
from models import Member
from session import add_expense, new_session, remove_member


def test_session_to_dict_uses_wire_names():
    s = new_session(["Alice", "Bob"])
    s = add_expense(s, "Hotel", 1000, "2025-01-01", 0, [0, 1])

    assert session_to_dict(s) == {
        "members": [{"id": 0, "name": "Alice"}, {"id": 1, "name": "Bob"}],
        "expenses": [{
            "id": 0,
            "description": "Hotel",
            "amount": 1000.0,
            "date": "2025-01-01",
            "paidById": 0,
            "paidForIds": [0, 1],
        }],
        "nextMemberId": 2,
        "nextExpenseId": 1,
    }


def test_dict_to_session_rebuilds_counters():
    d = {
        "members": [{"id": 3, "name": "Alice"}, {"id": 7, "name": "Bob"}],
        "expenses": [{"id": 4, "description": "x", "amount": 10, "date": "2025-01-01",
                      "paidById": 3, "paidForIds": [3, 7]}],
    }

    s = dict_to_session(d)

    assert s.members == (Member(3, "Alice"), Member(7, "Bob"))
    assert s.expenses[0].paid_for_ids == (3, 7)
    assert s.next_member_id == 8
    assert s.next_expense_id == 5


def test_dict_to_session_empty_lists_start_at_zero():
    s = dict_to_session({"members": [], "expenses": []})

    assert s.next_member_id == 0
    assert s.next_expense_id == 0


def test_stored_counter_is_kept_when_larger():
    s = new_session(["Alice", "Bob", "Carol"])
    s = remove_member(s, 2)

    restored = dict_to_session(session_to_dict(s))

    assert restored.next_member_id == 3


def test_malformed_snapshot_raises():
    with pytest.raises(KeyError):
        dict_to_session({"members": [{"id": 0}]})


def test_session_file_round_trip(tmp_path):
    s = new_session(["アリス", "Bob"])
    s = add_expense(s, "温泉", 4000, "2025-01-01", 0, [0, 1])
    path = tmp_path / "trip.json"

    save_session_file(s, str(path))

    assert "アリス" in path.read_text(encoding="utf-8")
    assert load_session_file(str(path)) == s


def test_load_settings_defaults_when_missing(tmp_path):
    assert load_settings(str(tmp_path / "nope.json")) == AppSettings()


def test_get_settings_reads_app_dir(isolated_home):
    isolated_home.mkdir(parents=True, exist_ok=True)
    (isolated_home / "settings.json").write_text(
        json.dumps({"settle_eps": 0.5, "currency": "€", "default_members": ["Ann", "Ben"]}),
        encoding="utf-8",
    )

    settings = get_settings()

    assert settings == AppSettings(settle_eps=0.5, currency="€", default_members=["Ann", "Ben"])
    assert [m.name for m in get_default_session(settings).members] == ["Ann", "Ben"]


def test_report_to_dict():
    s = new_session(["Alice", "Bob"])
    s = add_expense(s, "Hotel", 1000, "2025-01-01", 0, [0, 1])

    d = report_to_dict(compute_report(s.members, s.expenses))

    assert d["balances"] == {0: 500.0, 1: -500.0}
    assert d["transactions"] == [{"from": 1, "to": 0, "amount": 500.0}]
    assert d["detailed"] == [{
        "expenseId": 0,
        "expenseDescription": "Hotel",
        "expenseDate": "2025-01-01",
        "from": 1,
        "to": 0,
        "amount": 500.0,
    }]
    assert d["aggregated"][0]["totalAmount"] == 500.0
    assert d["aggregated"][0]["details"] == d["detailed"]
    assert d["memberBalances"] == [
        {"id": 0, "name": "Alice", "balance": 500.0, "isPaying": False},
        {"id": 1, "name": "Bob", "balance": -500.0, "isPaying": True},
    ]
    json.dumps(d)
