#!/usr/bin/env python3
"""
Entry point for running mysql_schema_diff as a module.
This file enables: python -m mysql_schema_diff
"""

import sys

from .main import main

if __name__ == '__main__':
    sys.exit(main())
