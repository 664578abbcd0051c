"""
FundLedger GUI
- Track two funds (e.g. a mobile wallet and a bank card) from one record form.
- Each fund's change is a ratio of the entered amount (|value| <= 1) or a fixed amount.
- Undo the latest entry, export the ledger as text, CSV or Excel.

Run:
  python fund_ledger_gui.py

Dependencies:
  pip install openpyxl
(Tkinter ships with most Python distributions; on some Linux you may need: sudo apt-get install python3-tk)
"""
from __future__ import annotations
import logging
import os

try:
    import tkinter as tk
except ModuleNotFoundError:
    tk = None

from persistence import default_adapter


def main():
    """Main entry point for the application"""
    logging.basicConfig(
        level=os.environ.get("FUND_LEDGER_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if tk is None:
        raise RuntimeError(
            'tkinter is not available. Install it (e.g., on Ubuntu: sudo apt-get install python3-tk) '
            'and re-run to use the GUI.'
        )

    from main_app import FundLedgerApp

    root = tk.Tk()
    FundLedgerApp(root, default_adapter())
    root.mainloop()


if __name__ == "__main__":
    main()
