#!/usr/bin/env python3
"""IntervalAlert — entry point.

Run with:
    python main.py run --duration 300 --percent 25
    python -m intervalalert
"""

from intervalalert.__main__ import main


if __name__ == "__main__":
    main()
