#!/usr/bin/env python3
"""
Launcher script for the fan design command line.
"""

from fandesign.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
