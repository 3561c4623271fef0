from __future__ import annotations

import sys

from dotenv import load_dotenv

from geotrail.cli import main

load_dotenv()

if __name__ == "__main__":
    sys.exit(main())
