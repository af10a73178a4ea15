"""Entry point script for the simultaneous contrast trial tools.

This small wrapper simply dispatches to :mod:`simcontrast.cli`.  Keeping the
actual logic in the package makes it possible to run the tools via
``python -m simcontrast`` *or* by executing this file directly from a checkout.
"""
from __future__ import annotations

from simcontrast.cli import main


if __name__ == "__main__":
    main()
