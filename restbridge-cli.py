#!/usr/bin/env python3
"""
RestBridge CLI wrapper

Runs the restbridge command line from a source checkout without installing.

Examples:
    python3 restbridge-cli.py curl "curl https://api.example.com/users"
    python3 restbridge-cli.py import-openapi petstore.yaml -o petstore.json
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent / 'src'))

from restbridge.cli import main


if __name__ == '__main__':
    main()
