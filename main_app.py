"""
Main application window for TripSplit GUI
"""
from __future__ import annotations
import logging
import os
from typing import Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog, simpledialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None
    simpledialog = None

from models import Session
from config import AppSettings, get_default_session, load_session_file, save_session_file
from session import (
    ValidationError,
    add_expense,
    add_member,
    remove_expense,
    remove_member,
    replace_expenses,
)
from session_store import SessionStore, SessionStoreError
from computations import compute_report, expense_log
from utils import format_amount
from excel_export import export_excel
from gui_dialogs import ExpenseDialog
from csv_handler import export_expenses_to_csv, import_expenses_from_csv

logger = logging.getLogger(__name__)

SETTLEMENT_MODES = (
    ("optimized", "Optimized transfers"),
    ("balances", "Balances"),
    ("detailed", "Per expense"),
)


class TripSplitApp(ttk.Frame):
    """Main application window"""

    def __init__(self, master: tk.Tk, settings: AppSettings, store: Optional[SessionStore] = None):
        super().__init__(master, padding=8)
        self.master = master
        self.master.geometry("960x640")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)

        self.settings = settings
        self.store = store or SessionStore()
        self.session: Session = get_default_session(settings)
        self.session_path: Optional[str] = None
        self.session_id: Optional[str] = None
        self.last_date: Optional[str] = None

        self._build_menu()
        self._build_ui()
        self.refresh_all()

    # ---------- Menu ----------
    def _build_menu(self):
        """Build application menu bar"""
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="New", command=self.new_session)
        filem.add_command(label="Open…", command=self.open_file)
        filem.add_command(label="Save", command=self.save_file)
        filem.add_command(label="Save As…", command=self.save_as_file)
        filem.add_separator()
        filem.add_command(label="Open Session…", command=self.open_stored_session)
        filem.add_command(label="Save to Session Store", command=self.save_stored_session)
        filem.add_command(label="Copy Session ID", command=self.copy_session_id)
        filem.add_separator()
        filem.add_command(label="Export CSV…", command=self.export_csv_dialog)
        filem.add_command(label="Import CSV…", command=self.import_csv_dialog)
        filem.add_separator()
        filem.add_command(label="Export Excel…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Exit", command=self.master.destroy)
        menubar.add_cascade(label="File", menu=filem)
        self.master.config(menu=menubar)

    # ---------- UI ----------
    def _build_ui(self):
        """Build main UI with tabs"""
        nb = ttk.Notebook(self)
        nb.grid(row=0, column=0, sticky="nsew")
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.tab_members = ttk.Frame(nb, padding=8)
        self.tab_expenses = ttk.Frame(nb, padding=8)
        self.tab_settlement = ttk.Frame(nb, padding=8)

        nb.add(self.tab_members, text="Members")
        nb.add(self.tab_expenses, text="Expenses")
        nb.add(self.tab_settlement, text="Settlement")

        self._build_members_tab()
        self._build_expenses_tab()
        self._build_settlement_tab()

    def _build_members_tab(self):
        """Build member management tab"""
        self.tab_members.columnconfigure(0, weight=1)
        frm = ttk.Frame(self.tab_members)
        frm.grid(row=0, column=0, sticky="nsew")
        self.tab_members.rowconfigure(0, weight=1)

        controls = ttk.Frame(frm)
        controls.grid(row=0, column=0, sticky="ew")
        self.new_member_var = tk.StringVar()
        entry = ttk.Entry(controls, textvariable=self.new_member_var, width=24)
        entry.pack(side="left")
        entry.bind("<Return>", lambda _e: self.add_member())
        ttk.Button(controls, text="Add", command=self.add_member).pack(side="left", padx=4)
        ttk.Button(controls, text="Remove Selected", command=self.remove_selected_member).pack(side="left", padx=4)

        self.members_list = tk.Listbox(frm, height=18)
        self.members_list.grid(row=1, column=0, sticky="nsew", pady=6)
        frm.rowconfigure(1, weight=1)
        frm.columnconfigure(0, weight=1)

        ttk.Label(frm, text="Note: removing a member also removes every expense they paid or shared.").grid(
            row=2, column=0, sticky="w", pady=(8, 0))

    def _build_expenses_tab(self):
        """Build expenses tab"""
        top = ttk.Frame(self.tab_expenses)
        top.grid(row=0, column=0, sticky="ew")
        self.tab_expenses.columnconfigure(0, weight=1)

        ttk.Button(top, text="Add", command=self.add_expense).pack(side="left", padx=3)
        ttk.Button(top, text="Delete", command=self.delete_selected_expense).pack(side="left", padx=3)

        ttk.Separator(self.tab_expenses, orient="horizontal").grid(row=1, column=0, sticky="ew", pady=6)

        cols = ("date", "description", "amount", "paid_by", "paid_for")
        self.exp_tree = ttk.Treeview(self.tab_expenses, columns=cols, show="headings", height=18)
        for c, w in zip(cols, [95, 240, 100, 110, 320]):
            self.exp_tree.heading(c, text=c)
            self.exp_tree.column(c, width=w, anchor="w")
        self.exp_tree.grid(row=2, column=0, sticky="nsew")
        self.tab_expenses.rowconfigure(2, weight=1)

        yscroll = ttk.Scrollbar(self.tab_expenses, orient="vertical", command=self.exp_tree.yview)
        self.exp_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=2, column=1, sticky="ns")

    def _build_settlement_tab(self):
        """Build settlement tab with its display modes"""
        self.tab_settlement.columnconfigure(0, weight=1)

        modes = ttk.Frame(self.tab_settlement)
        modes.grid(row=0, column=0, sticky="ew")
        self.mode_var = tk.StringVar(value="optimized")
        for value, label in SETTLEMENT_MODES:
            ttk.Radiobutton(modes, text=label, value=value, variable=self.mode_var,
                            command=self.refresh_settlement).pack(side="left", padx=4)

        self.settlement_note = tk.StringVar(value="")
        ttk.Label(self.tab_settlement, textvariable=self.settlement_note).grid(row=1, column=0, sticky="w", pady=(6, 0))

        # columns are re-labelled per mode
        cols = ("a", "b", "c", "d")
        self.set_tree = ttk.Treeview(self.tab_settlement, columns=cols, show="tree headings", height=20)
        self.set_tree.column("#0", width=30, stretch=False)
        for c, w in zip(cols, [180, 180, 140, 260]):
            self.set_tree.column(c, width=w, anchor="w")
        self.set_tree.grid(row=2, column=0, sticky="nsew", pady=6)
        self.tab_settlement.rowconfigure(2, weight=1)

        yscroll = ttk.Scrollbar(self.tab_settlement, orient="vertical", command=self.set_tree.yview)
        self.set_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=2, column=1, sticky="ns")

    # ---------- Members ----------
    def add_member(self):
        """Add new member"""
        try:
            self.session = add_member(self.session, self.new_member_var.get())
        except ValidationError as ex:
            messagebox.showinfo("Members", str(ex))
            return
        self.new_member_var.set("")
        self.refresh_all()

    def remove_selected_member(self):
        """Remove selected member"""
        sel = self.members_list.curselection()
        if not sel:
            return
        member = self.session.members[sel[0]]
        if messagebox.askyesno("Remove member",
                               f"Remove '{member.name}'? Expenses involving them will be deleted."):
            self.session = remove_member(self.session, member.id)
            self.refresh_all()

    # ---------- Expenses ----------
    def add_expense(self):
        """Add new expense"""
        if not self.session.members:
            messagebox.showerror("No members", "Please add at least one member first.")
            return
        dlg = ExpenseDialog(self.master, self.session, self.last_date)
        self.master.wait_window(dlg)
        e = dlg.result
        if e:
            self.session = add_expense(self.session, e.description, e.amount, e.date,
                                       e.paid_by_id, e.paid_for_ids)
            self.last_date = e.date
            self.refresh_all()

    def delete_selected_expense(self):
        """Delete selected expense"""
        sel = self.exp_tree.selection()
        if not sel:
            messagebox.showinfo("Delete", "Select an expense row first.")
            return
        if messagebox.askyesno("Delete", "Delete selected expense?"):
            self.session = remove_expense(self.session, int(sel[0]))
            self.refresh_all()

    # ---------- File ops ----------
    def new_session(self):
        """Start a new session"""
        if messagebox.askyesno("New", "Start a new session (unsaved changes will be lost)?"):
            self.session = get_default_session(self.settings)
            self.session_path = None
            self.session_id = None
            self.refresh_all()

    def open_file(self):
        """Open session snapshot from file"""
        fp = filedialog.askopenfilename(
            title="Open session JSON",
            filetypes=[("Session JSON", "*.json"), ("All files", "*.*")]
        )
        if not fp:
            return
        try:
            self.session = load_session_file(fp)
        except Exception as ex:
            logger.exception("Failed to open %s", fp)
            messagebox.showerror("Open failed", str(ex))
            return
        self.session_path = fp
        self.session_id = None
        self.refresh_all()

    def save_file(self):
        """Save session snapshot to file"""
        if not self.session_path:
            return self.save_as_file()
        try:
            save_session_file(self.session, self.session_path)
        except OSError as ex:
            logger.exception("Failed to save %s", self.session_path)
            messagebox.showerror("Save failed", str(ex))
            return
        self._update_title()

    def save_as_file(self):
        """Save session snapshot to new file"""
        fp = filedialog.asksaveasfilename(
            title="Save session JSON",
            defaultextension=".json",
            filetypes=[("Session JSON", "*.json")]
        )
        if not fp:
            return
        self.session_path = fp
        self.save_file()

    def open_stored_session(self):
        """Load a session from the session store by id"""
        known = self.store.list_sessions()
        prompt = "Session ID:"
        if known:
            prompt += "\n\nRecent:\n" + "\n".join(known[:5])
        sid = simpledialog.askstring("Open Session", prompt, parent=self.master)
        if not sid:
            return
        try:
            session = self.store.load_session(sid.strip())
        except SessionStoreError as ex:
            messagebox.showerror("Open failed", str(ex))
            return
        if session is None:
            messagebox.showerror("Open failed", "Session not found.")
            return
        self.session = session
        self.session_id = sid.strip()
        self.session_path = None
        self.refresh_all()

    def save_stored_session(self):
        """Save to the session store, creating a session id on first save"""
        try:
            if not self.session_id:
                self.session_id = self.store.create_session()
            self.store.save_session(self.session_id, self.session)
        except (OSError, SessionStoreError) as ex:
            logger.exception("Failed to save session %s", self.session_id)
            messagebox.showerror("Save failed", str(ex))
            return
        self._update_title()
        messagebox.showinfo("Saved", f"Saved session {self.session_id}")

    def copy_session_id(self):
        """Copy the current session id to the clipboard"""
        if not self.session_id:
            messagebox.showinfo("Session", "Save to the session store first.")
            return
        self.master.clipboard_clear()
        self.master.clipboard_append(self.session_id)

    def export_excel_dialog(self):
        """Export to Excel file"""
        fp = filedialog.asksaveasfilename(
            title="Export Excel",
            defaultextension=".xlsx",
            filetypes=[("Excel Workbook", "*.xlsx")]
        )
        if not fp:
            return
        try:
            export_excel(self.session, fp, self.settings.currency, self.settings.settle_eps)
            messagebox.showinfo("Export", f"Exported: {fp}")
        except OSError as ex:
            logger.exception("Excel export failed")
            messagebox.showerror("Export failed", str(ex))

    # ---------- CSV Import/Export ----------
    def export_csv_dialog(self):
        """Export current expenses to CSV file"""
        if not self.session.expenses:
            messagebox.showinfo("Export CSV", "No expenses to export.")
            return

        fp = filedialog.asksaveasfilename(
            title="Export Expenses to CSV",
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return

        try:
            export_expenses_to_csv(self.session.expenses, fp)
            messagebox.showinfo("Export CSV", f"Exported {len(self.session.expenses)} expenses to:\n{fp}")
        except OSError as ex:
            messagebox.showerror("Export failed", str(ex))

    def import_csv_dialog(self):
        """Import expenses from CSV file"""
        fp = filedialog.askopenfilename(
            title="Import Expenses from CSV",
            filetypes=[("CSV files", "*.csv"), ("All files", "*.*")]
        )
        if not fp:
            return

        try:
            imported = import_expenses_from_csv(fp)
        except (OSError, ValueError) as ex:
            messagebox.showerror("Import failed", str(ex))
            return
        if not imported:
            messagebox.showinfo("Import CSV", "No expenses found in CSV file.")
            return

        choice = messagebox.askyesnocancel(
            "Import CSV",
            f"Found {len(imported)} expenses in CSV.\n\n"
            "Yes: Append to current expenses\n"
            "No: Replace current expenses\n"
            "Cancel: Cancel import"
        )
        if choice is None:
            return

        try:
            if choice:
                session = self.session
                for e in imported:
                    session = add_expense(session, e.description, e.amount, e.date,
                                          e.paid_by_id, e.paid_for_ids)
            else:
                session = replace_expenses(self.session, imported)
        except ValidationError as ex:
            messagebox.showerror("Import failed", str(ex))
            return

        self.session = session
        self.refresh_all()

    # ---------- Refresh ----------
    def _name(self, member_id: int) -> str:
        return self.session.member_by_id()[member_id].name

    def _money(self, amount: float) -> str:
        return format_amount(amount, self.settings.currency)

    def _update_title(self):
        label = self.session_id or (os.path.basename(self.session_path) if self.session_path else "")
        self.master.title(f"TripSplit - {label}" if label else "TripSplit")

    def refresh_all(self):
        """Refresh all UI elements"""
        self._update_title()
        self.refresh_members()
        self.refresh_expenses()
        self.refresh_settlement()

    def refresh_members(self):
        """Refresh member list"""
        self.members_list.delete(0, tk.END)
        for m in self.session.members:
            self.members_list.insert(tk.END, m.name)

    def refresh_expenses(self):
        """Refresh expenses tree view"""
        for iid in self.exp_tree.get_children():
            self.exp_tree.delete(iid)

        for e, payer, paid_for in expense_log(self.session.members, self.session.expenses):
            values = (
                e.date,
                e.description,
                self._money(e.amount),
                payer,
                ", ".join(paid_for),
            )
            self.exp_tree.insert("", "end", iid=str(e.id), values=values)

    def _set_headings(self, *labels):
        for c, label in zip(("a", "b", "c", "d"), labels + ("",) * (4 - len(labels))):
            self.set_tree.heading(c, text=label)

    def refresh_settlement(self):
        """Refresh settlement tab for the selected mode"""
        for iid in self.set_tree.get_children():
            self.set_tree.delete(iid)

        known = self.session.member_by_id()
        report = compute_report(self.session.members, self.session.expenses, self.settings.settle_eps)
        mode = self.mode_var.get()

        if mode == "optimized":
            self._set_headings("from", "to", "amount")
            # ghost ids have no member to show
            rows = [t for t in report.transactions if t.from_id in known and t.to_id in known]
            for t in rows:
                self.set_tree.insert("", "end", values=(self._name(t.from_id), self._name(t.to_id),
                                                        self._money(t.amount)))
            self.settlement_note.set(f"{len(rows)} transfers settle every balance." if rows
                                     else "Nothing to settle.")
        elif mode == "balances":
            self._set_headings("member", "balance", "")
            for mb in report.member_balances:
                sign = "-" if mb.is_paying else "+"
                self.set_tree.insert("", "end", values=(mb.name, f"{sign}{self._money(abs(mb.balance))}", ""))
            self.settlement_note.set("+ receives, - pays")
        else:
            self._set_headings("from", "to", "amount", "expense")
            for agg in report.aggregated:
                if agg.from_id not in known or agg.to_id not in known:
                    continue
                parent = self.set_tree.insert("", "end", open=False, values=(
                    self._name(agg.from_id), self._name(agg.to_id), self._money(agg.total_amount), ""))
                for d in agg.details:
                    self.set_tree.insert(parent, "end", values=(
                        "", d.expense_date, self._money(d.amount), d.expense_description))
            self.settlement_note.set("Expand a row to see the expenses behind it.")
