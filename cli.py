#!/usr/bin/env python
"""
pageperf CLI entry point.

Usage:
    python cli.py run                     # Run the built-in demoqa.com suite
    python cli.py run suite.yaml          # Run a suite file
    python cli.py run suite.yaml --headed # Watch the browser
    python cli.py list suite.yaml         # List scenarios without running
"""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))

from pageperf.cli.app import main

if __name__ == "__main__":
    main()
