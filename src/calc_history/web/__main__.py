"""Entry point: python -m calc_history.web"""

from __future__ import annotations

import sys

from calc_history.web.launcher import main

if __name__ == "__main__":
    sys.exit(main())
