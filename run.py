#!/usr/bin/env python3
"""Convenience runner for the trail route replay tool.

Usage:
    python run.py --trails trails.geojson --script clicks.json
"""
import sys

from trailsnap.main import main

if __name__ == "__main__":
    sys.exit(main())
