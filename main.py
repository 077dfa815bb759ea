"""
Application Entry Point
Run with: python main.py <command> [options]
"""

import sys

from aiscripts.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
