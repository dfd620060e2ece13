"""Main entry point for running bestfit_pkg as a module.

This allows running bestfit with:
    python -m bestfit_pkg --data "1,5; 2,7; 3,9"
    python -m bestfit_pkg --sequence "1 4 9 16" --template "#poly(2)"
    python -m bestfit_pkg --health-check

This is equivalent to running:
    python -m bestfit_pkg.cli
    bestfit
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
