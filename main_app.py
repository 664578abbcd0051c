"""
Main application window for FundLedger GUI
"""
from __future__ import annotations
import logging
import os
from typing import Dict

try:
    import tkinter as tk
    from tkinter import ttk, messagebox, filedialog
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None
    filedialog = None

from models import FundId
from config import get_fund_labels
from computations import is_meaningful_record
from exporters import export_excel, export_filename, export_history_to_csv, write_text_export
from gui_dialogs import InitialAmountsDialog
from ledger_engine import LedgerEngine
from persistence import PersistenceAdapter, attach_autosave, restore_engine
from utils import format_amount, safe_decimal

logger = logging.getLogger(__name__)


class FundLedgerApp(ttk.Frame):
    """Main application window: setup form first, then balances, record form and history"""

    def __init__(self, master: tk.Tk, adapter: PersistenceAdapter):
        super().__init__(master, padding=8)
        self.master = master
        self.master.title("FundLedger")
        self.master.geometry("900x620")
        self.grid(row=0, column=0, sticky="nsew")
        self.master.rowconfigure(0, weight=1)
        self.master.columnconfigure(0, weight=1)
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

        self.labels: Dict[FundId, str] = get_fund_labels()
        self.engine: LedgerEngine = restore_engine(adapter)
        attach_autosave(self.engine, adapter)

        self._build_menu()
        self.setup_frame = self._build_setup_frame()
        self.active_frame = self._build_active_frame()
        self.refresh_all()

    def _label(self, f: FundId) -> str:
        return self.labels.get(f, f)

    # ---------- Menu ----------
    def _build_menu(self):
        menubar = tk.Menu(self.master)
        filem = tk.Menu(menubar, tearoff=0)
        filem.add_command(label="Export Text…", command=self.export_text_dialog)
        filem.add_command(label="Export CSV…", command=self.export_csv_dialog)
        filem.add_command(label="Export Excel…", command=self.export_excel_dialog)
        filem.add_separator()
        filem.add_command(label="Exit", command=self.master.destroy)
        menubar.add_cascade(label="File", menu=filem)

        ledgerm = tk.Menu(menubar, tearoff=0)
        ledgerm.add_command(label="Edit Initial Amounts…", command=self.edit_initial_amounts)
        ledgerm.add_command(label="Back to Setup", command=self.reset_to_setup)
        menubar.add_cascade(label="Ledger", menu=ledgerm)

        self.master.config(menu=menubar)

    # ---------- UI ----------
    def _build_setup_frame(self) -> ttk.Frame:
        frm = ttk.Frame(self, padding=12)
        ttk.Label(frm, text="Initial amounts", font=("", 14, "bold")).grid(row=0, column=0, columnspan=2,
                                                                            sticky="w", pady=(0, 10))
        self.setup_vars: Dict[FundId, tk.StringVar] = {}
        for i, f in enumerate(self.engine.funds):
            ttk.Label(frm, text=f"{self._label(f)} initial amount").grid(row=i + 1, column=0, sticky="w", pady=2)
            v = tk.StringVar()
            self.setup_vars[f] = v
            ttk.Entry(frm, textvariable=v, width=18).grid(row=i + 1, column=1, sticky="w")
        ttk.Button(frm, text="Set initial amounts", command=self.confirm_setup).grid(
            row=len(self.engine.funds) + 1, column=0, columnspan=2, sticky="ew", pady=(10, 0))
        return frm

    def _build_active_frame(self) -> ttk.Frame:
        frm = ttk.Frame(self)
        frm.columnconfigure(0, weight=1)
        funds = self.engine.funds

        bal = ttk.Frame(frm)
        bal.grid(row=0, column=0, sticky="ew")
        self.balance_vars: Dict[FundId, tk.StringVar] = {}
        for i, f in enumerate(funds):
            box = ttk.LabelFrame(bal, text=self._label(f), padding=8)
            box.grid(row=0, column=i, sticky="ew", padx=4)
            bal.columnconfigure(i, weight=1)
            v = tk.StringVar()
            self.balance_vars[f] = v
            ttk.Label(box, textvariable=v, font=("", 16)).pack(anchor="w")

        form = ttk.Frame(frm, padding=(0, 10))
        form.grid(row=1, column=0, sticky="ew")
        self.gross_vars: Dict[FundId, tk.StringVar] = {}
        self.alloc_vars: Dict[FundId, tk.StringVar] = {}
        r = 0
        for f in funds:
            ttk.Label(form, text=f"{self._label(f)} amount (+ income, - expense)").grid(row=r, column=0, sticky="w")
            self.gross_vars[f] = tk.StringVar()
            ttk.Entry(form, textvariable=self.gross_vars[f], width=18).grid(row=r, column=1, sticky="w", pady=2)
            r += 1
        for f in funds:
            ttk.Label(form, text=f"{self._label(f)} ratio (-1..1) or fixed amount").grid(row=r, column=0, sticky="w")
            self.alloc_vars[f] = tk.StringVar()
            ttk.Entry(form, textvariable=self.alloc_vars[f], width=18).grid(row=r, column=1, sticky="w", pady=2)
            r += 1
        ttk.Label(form, text="Note").grid(row=r, column=0, sticky="w")
        self.note_var = tk.StringVar()
        ttk.Entry(form, textvariable=self.note_var, width=36).grid(row=r, column=1, sticky="w", pady=2)
        r += 1

        btns = ttk.Frame(form)
        btns.grid(row=r, column=0, columnspan=2, sticky="w", pady=(8, 0))
        ttk.Button(btns, text="Record", command=self.record).pack(side="left", padx=3)
        self.undo_btn = ttk.Button(btns, text="Undo", command=self.undo)
        self.undo_btn.pack(side="left", padx=3)

        cols = ["time", "kind"] + [f"{f}_change" for f in funds] + ["note"]
        self.hist_tree = ttk.Treeview(frm, columns=cols, show="headings", height=14)
        for c in cols:
            title = c
            if c.endswith("_change"):
                title = f"{self._label(c[:-len('_change')])} change"
            self.hist_tree.heading(c, text=title)
            self.hist_tree.column(c, width=150 if c != "note" else 260, anchor="w")
        self.hist_tree.grid(row=2, column=0, sticky="nsew")
        frm.rowconfigure(2, weight=1)

        yscroll = ttk.Scrollbar(frm, orient="vertical", command=self.hist_tree.yview)
        self.hist_tree.configure(yscroll=yscroll.set)
        yscroll.grid(row=2, column=1, sticky="ns")
        return frm

    # ---------- Actions ----------
    def confirm_setup(self):
        """Read initial amounts and switch to the ledger view"""
        amounts = {f: safe_decimal(v.get()) for f, v in self.setup_vars.items()}
        self.engine.complete_setup(amounts)
        self.refresh_all()

    def reset_to_setup(self):
        if messagebox.askyesno("Back to Setup", "Return to the setup screen? Balances and history are kept."):
            self.engine.reset_to_setup()
            self.refresh_all()

    def edit_initial_amounts(self):
        dlg = InitialAmountsDialog(self.master, self.engine.funds, self.labels, self.engine.initial_amount)
        self.master.wait_window(dlg)
        if dlg.result:
            self.engine.set_initial_amounts(dlg.result)
            self.refresh_all()

    def record(self):
        """Validate the record form and apply it"""
        gross = {f: safe_decimal(v.get()) for f, v in self.gross_vars.items()}
        alloc = {f: safe_decimal(v.get()) for f, v in self.alloc_vars.items()}
        if not is_meaningful_record(gross, alloc):
            messagebox.showinfo("Record", "Enter an amount with a ratio, or a fixed amount, for at least one fund.")
            return
        result = self.engine.record_transaction(gross, alloc, self.note_var.get().strip())
        if not result.recorded:
            messagebox.showinfo("Record", "Nothing to record: every fund change is zero.")
            return
        for v in list(self.gross_vars.values()) + list(self.alloc_vars.values()) + [self.note_var]:
            v.set("")
        self.refresh_all()

    def undo(self):
        result = self.engine.undo_last()
        if not result.undone:
            messagebox.showinfo("Undo", "Nothing to undo.")
            return
        self.refresh_all()

    # ---------- Export ----------
    def _ask_export_path(self, title: str, ext: str, filetypes):
        return filedialog.asksaveasfilename(
            title=title,
            initialfile=export_filename(ext=ext),
            defaultextension=f".{ext}",
            filetypes=filetypes,
        )

    def _export(self, title: str, ext: str, filetypes, writer):
        fp = self._ask_export_path(title, ext, filetypes)
        if not fp:
            return
        try:
            writer(fp)
            messagebox.showinfo("Export", f"Exported: {os.path.basename(fp)}")
        except OSError as ex:
            logger.error("export to %s failed: %s", fp, ex)
            messagebox.showerror("Export failed", str(ex))

    def export_text_dialog(self):
        self._export("Export Ledger", "txt", [("Text files", "*.txt")],
                     lambda fp: write_text_export(self.engine.state, fp, self.labels))

    def export_csv_dialog(self):
        if not self.engine.history:
            messagebox.showinfo("Export CSV", "No entries to export.")
            return
        self._export("Export History to CSV", "csv", [("CSV files", "*.csv"), ("All files", "*.*")],
                     lambda fp: export_history_to_csv(self.engine.state, fp))

    def export_excel_dialog(self):
        self._export("Export Excel", "xlsx", [("Excel Workbook", "*.xlsx")],
                     lambda fp: export_excel(self.engine.state, fp, self.labels))

    # ---------- Refresh ----------
    def refresh_all(self):
        if self.engine.is_first_run:
            self.active_frame.grid_remove()
            for f, v in self.setup_vars.items():
                v.set(str(self.engine.initial_amount[f]))
            self.setup_frame.grid(row=0, column=0, sticky="nsew")
        else:
            self.setup_frame.grid_remove()
            self.active_frame.grid(row=0, column=0, sticky="nsew")
        self.refresh_balances()
        self.refresh_history()

    def refresh_balances(self):
        for f, v in self.balance_vars.items():
            v.set(f"¥{format_amount(self.engine.balance[f])}")

    def refresh_history(self):
        for iid in self.hist_tree.get_children():
            self.hist_tree.delete(iid)
        for e in self.engine.history:
            changes = [format_amount(e.delta[f], signed=True) for f in self.engine.funds]
            self.hist_tree.insert("", "end", values=[e.timestamp, e.kind.value] + changes + [e.note or "—"])
        self.undo_btn.state(["!disabled"] if self.engine.history else ["disabled"])
