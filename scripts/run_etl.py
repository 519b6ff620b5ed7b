"""
Run the taxi trip ETL from a source checkout

    python scripts/run_etl.py data/sample.csv --export-duplicates
"""

import sys
from pathlib import Path

# Add repository root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from trip_etl.cli import main


if __name__ == '__main__':
    sys.exit(main())
