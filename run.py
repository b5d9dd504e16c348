#!/usr/bin/env python3
"""Convenience runner for the activity telemetry command line.

Usage:
    python run.py file path/to/activity.tcx
    python run.py --output-format json strava 123456789
"""
import sys

from activity_telemetry.main import main

if __name__ == "__main__":
    sys.exit(main())
