#!/usr/bin/env python
"""
Run the zone grid CLI from a source checkout

    python cli.py generate --input data/neighborhoods.geojson
"""

import sys

from zonegrid.cli import main

if __name__ == "__main__":
    sys.exit(main())
