#!/usr/bin/env python3
"""SUBSWEEP main entry point.

Usage::

    python main.py scan example.com -d
    python main.py scan example.com -d words.txt -o found.txt
    python main.py scan example.com -l 1-3 --no-title
    python main.py version
"""

from subsweep.cli import main

if __name__ == "__main__":
    main()
