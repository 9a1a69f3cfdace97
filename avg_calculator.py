#!/usr/bin/env python3
"""
Convenience launcher for the average calculator service.
For new usage, prefer: python -m avgcalc
"""

from avgcalc.cli import main

if __name__ == "__main__":
    main()
