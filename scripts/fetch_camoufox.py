#!/usr/bin/env python3
"""
Download the Camoufox browser build used by the hardened engine.

Never fails the surrounding install: a failed download only warns, since
the standard engine works without it.

Usage:
    python scripts/fetch_camoufox.py
    SKIP_CAMOUFOX_FETCH=1 python scripts/fetch_camoufox.py  # no-op
"""

from __future__ import annotations

import os
import subprocess
import sys


def fetch_camoufox() -> int:
    """Run ``python -m camoufox fetch``. Always returns 0."""
    if os.environ.get("SKIP_CAMOUFOX_FETCH") == "1":
        print("Skipping Camoufox browser fetch because SKIP_CAMOUFOX_FETCH=1")
        return 0

    try:
        result = subprocess.run([sys.executable, "-m", "camoufox", "fetch"], check=False)
    except OSError as e:
        print(f"Camoufox fetch failed to start: {e}", file=sys.stderr)
        return 0

    if result.returncode != 0:
        print(
            f"Camoufox fetch exited with code {result.returncode}. "
            "You may need to run it manually: python -m camoufox fetch",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(fetch_camoufox())
