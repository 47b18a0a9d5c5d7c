#!/usr/bin/env python3
"""
Position Indicator - Entry Point

Run this file directly or use: python -m position_indicator.main

Usage:
    python run_indicator.py --help
    python run_indicator.py --duration 30
    python run_indicator.py --display --command "interval 0.1"
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from position_indicator.main import main

if __name__ == "__main__":
    sys.exit(main())
