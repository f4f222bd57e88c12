"""
TripSplit GUI
- Record trip members and who paid what for whom.
- See net balances, the transfers that settle them, and the per-expense debts behind them.
- Save sessions as JSON files or in the local session store; export CSV or an Excel report.

Run:
  python trip_split_gui.py

Dependencies:
  pip install openpyxl
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations
import logging

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None

from config import get_settings


def main():
    """Main entry point for the application"""
    logging.basicConfig(level=logging.INFO)
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )

    from main_app import TripSplitApp

    root = tk.Tk()
    TripSplitApp(root, get_settings())
    root.mainloop()


if __name__ == "__main__":
    main()
