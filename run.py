#!/usr/bin/env python3
"""Run the calc-history web server from the project root without relying on editable install.

Usage (from project root):  python run.py [--port 8400] [--config settings.yml]
"""
from __future__ import annotations

import sys
from pathlib import Path

# Add src/ so that "import calc_history" works when not installed
_root = Path(__file__).resolve().parent
_src = _root / "src"
if _src.exists() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from calc_history.web.launcher import main

if __name__ == "__main__":
    sys.exit(main())
