#!/usr/bin/env python3
"""
Build the packaged base dictionary (safecorrect/data/base_safe.json).

Thin wrapper around `safecorrect.build` for running from a checkout.

Usage:
    uv run python scripts/build_dictionary.py
    uv run python scripts/build_dictionary.py --no-download -v
"""

import sys

from safecorrect.build import main

if __name__ == "__main__":
    sys.exit(main())
