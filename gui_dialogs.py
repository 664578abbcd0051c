"""
Dialog windows for FundLedger GUI
"""
from __future__ import annotations
from decimal import Decimal
from typing import Dict, List, Optional

try:
    import tkinter as tk
    from tkinter import ttk, messagebox
except ModuleNotFoundError:
    tk = None
    ttk = None
    messagebox = None

from models import FundId
from utils import safe_decimal


class InitialAmountsDialog(tk.Toplevel):
    """Dialog for editing each fund's initial amount after setup"""

    def __init__(self, master, funds: List[FundId], labels: Dict[FundId, str],
                 current: Dict[FundId, Decimal]):
        super().__init__(master)
        self.title("Edit Initial Amounts")
        self.resizable(False, False)
        self.funds = funds
        self.vars: Dict[FundId, tk.StringVar] = {}
        self.result: Optional[Dict[FundId, Decimal]] = None

        frm = ttk.Frame(self, padding=10)
        frm.grid(row=0, column=0, sticky="nsew")

        ttk.Label(frm, text="Balances shift by the change; recorded entries are kept.").grid(
            row=0, column=0, columnspan=2, sticky="w", pady=(0, 8)
        )

        for i, f in enumerate(funds):
            ttk.Label(frm, text=labels.get(f, f)).grid(row=i + 1, column=0, sticky="w")
            v = tk.StringVar(value=str(current.get(f, Decimal("0"))))
            self.vars[f] = v
            ttk.Entry(frm, textvariable=v, width=16).grid(row=i + 1, column=1, sticky="w")

        btns = ttk.Frame(frm)
        btns.grid(row=len(funds) + 2, column=0, columnspan=2, sticky="e", pady=(10, 0))
        ttk.Button(btns, text="OK", command=self._ok).grid(row=0, column=0, padx=4)
        ttk.Button(btns, text="Cancel", command=self._cancel).grid(row=0, column=1, padx=4)

        self.bind("<Return>", lambda *_: self._ok())
        self.grab_set()
        self.transient(master)

    def _ok(self):
        """Validate and close"""
        out = {}
        for f, v in self.vars.items():
            d = safe_decimal(v.get(), None)
            if d is None:
                messagebox.showerror("Invalid amount", f"Amount for {f} must be a number.")
                return
            out[f] = d
        self.result = out
        self.destroy()

    def _cancel(self):
        self.result = None
        self.destroy()
