#!/usr/bin/env python3
"""Main entry point for titlecard package."""

import sys
from titlecard.cli import main

if __name__ == "__main__":
    sys.exit(main())
