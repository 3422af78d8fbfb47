"""
Package entry point for python -m execution.

USAGE:
    python -m clocking_client status           # Show open sessions
    python -m clocking_client start "Title"    # Start a session
    python -m clocking_client dashboard        # Launch local web dashboard
"""

import sys

from clocking_client.cli import main

if __name__ == "__main__":
    sys.exit(main())
