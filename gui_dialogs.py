"""
Dialog windows for TripSplit GUI
"""
from __future__ import annotations
from typing import Dict, Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None

from models import Expense, Session
from session import ValidationError, validate_expense
from utils import today_str


class ExpenseDialog(tk.Toplevel):
    """Dialog for adding an expense"""

    def __init__(self, master, session: Session, last_date: Optional[str] = None):
        super().__init__(master)
        self.title("Add Expense")
        self.resizable(False, False)
        self.session = session
        self.result: Optional[Expense] = None

        self._bind_enter_to_ok()

        members = list(session.members)
        self.name_to_id = {m.name: m.id for m in members}

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        self.v_description = tk.StringVar(value="")
        self.v_amount = tk.StringVar(value="")
        self.v_date = tk.StringVar(value=last_date or today_str())
        self.v_payer = tk.StringVar(value=members[0].name if members else "")

        r = 0
        ttk.Label(frm, text="Description").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_description, width=28).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Amount").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_amount, width=18).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Date (YYYY-MM-DD)").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Entry(frm, textvariable=self.v_date, width=18).grid(row=r, column=1, sticky="w")
        r += 1

        ttk.Label(frm, text="Paid by").grid(row=r, column=0, sticky="w", pady=2)
        ttk.Combobox(frm, textvariable=self.v_payer, values=[m.name for m in members],
                     width=16, state="readonly").grid(row=r, column=1, sticky="w")
        r += 1

        # everyone is a beneficiary unless unticked
        ttk.Label(frm, text="Paid for").grid(row=r, column=0, sticky="nw", pady=2)
        checks = ttk.Frame(frm)
        checks.grid(row=r, column=1, sticky="w")
        self.paid_for_vars: Dict[int, tk.BooleanVar] = {}
        for i, m in enumerate(members):
            v = tk.BooleanVar(value=True)
            self.paid_for_vars[m.id] = v
            ttk.Checkbutton(checks, text=m.name, variable=v).grid(row=i // 3, column=i % 3, sticky="w", padx=2)
        r += 1

        btns = ttk.Frame(frm)
        btns.grid(row=r, column=0, columnspan=2, sticky="e", pady=(10, 0))
        ttk.Button(btns, text="OK", command=self._ok).grid(row=0, column=0, padx=4)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=1, padx=4)

        self.grab_set()
        self.transient(master)

    def _bind_enter_to_ok(self):
        """Bind Enter/Return to OK"""

        def on_enter(event=None):
            self._ok()
            return "break"

        self.bind("<Return>", on_enter)
        self.bind("<KP_Enter>", on_enter)

    def _ok(self):
        """Validate and close"""
        paid_for = [mid for mid, v in self.paid_for_vars.items() if v.get()]
        try:
            self.result = validate_expense(
                self.session,
                self.v_description.get(),
                self.v_amount.get(),
                self.v_date.get(),
                self.name_to_id.get(self.v_payer.get()),
                paid_for,
            )
        except ValidationError as ex:
            messagebox.showerror("Invalid expense", str(ex), parent=self)
            return
        self.destroy()

    def _cancel(self):
        """Cancel and close"""
        self.result = None
        self.destroy()
