"""
CSV export and import functionality for TripSplit
"""
from __future__ import annotations
import csv
import logging
from typing import List, Sequence

from models import Expense

logger = logging.getLogger(__name__)

CSV_COLUMNS = ['id', 'date', 'description', 'amount', 'paid_by_id', 'paid_for_ids']


def export_expenses_to_csv(expenses: Sequence[Expense], filepath: str) -> None:
    """
    Export expenses list to CSV file
    CSV columns: id, date, description, amount, paid_by_id, paid_for_ids
    paid_for_ids is written as ids joined by ';'
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(CSV_COLUMNS)
        for e in expenses:
            writer.writerow([
                e.id,
                e.date,
                e.description,
                e.amount,
                e.paid_by_id,
                ';'.join(str(i) for i in e.paid_for_ids),
            ])
    logger.info("Exported %d expenses to %s", len(expenses), filepath)


def import_expenses_from_csv(filepath: str) -> List[Expense]:
    """
    Import expenses list from CSV file
    Returns list of Expense objects; a malformed row raises ValueError
    """
    expenses = []

    with open(filepath, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        missing = [c for c in CSV_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"CSV is missing columns: {', '.join(missing)}")

        for row in reader:
            try:
                paid_for = tuple(
                    int(x) for x in row['paid_for_ids'].split(';') if x.strip()
                )
                expense = Expense(
                    id=int(row['id']),
                    date=row['date'].strip(),
                    description=row['description'],
                    amount=float(row['amount']),
                    paid_by_id=int(row['paid_by_id']),
                    paid_for_ids=paid_for,
                )
            except (TypeError, ValueError) as ex:
                raise ValueError(f"Line {reader.line_num}: {ex}") from ex
            expenses.append(expense)

    logger.info("Imported %d expenses from %s", len(expenses), filepath)
    return expenses
