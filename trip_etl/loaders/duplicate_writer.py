"""
Export of duplicate trips to a secondary CSV file
"""

from pathlib import Path
from typing import Sequence

import pandas as pd

from trip_etl.models.taxi_trip import TaxiTrip, TRIP_COLUMNS
from trip_etl.utils.logger import get_logger
from trip_etl.utils.exceptions import DuplicateExportError


logger = get_logger(__name__)


def write_duplicates(trips: Sequence[TaxiTrip], output_path: Path) -> Path:
    """
    Write duplicate trips with the input file's header and column order

    Timestamps are written as ISO-8601 UTC values; an empty sequence
    produces a header-only file.

    Args:
        trips: Duplicate trips in encounter order
        output_path: Destination file, overwritten if present

    Returns:
        Path of the written file

    Raises:
        DuplicateExportError: If the file cannot be written
    """
    output_path = Path(output_path)
    rows = []
    for trip in trips:
        row = trip.to_row()
        row['tpep_pickup_datetime'] = trip.pickup_datetime.isoformat()
        row['tpep_dropoff_datetime'] = trip.dropoff_datetime.isoformat()
        rows.append(row)

    frame = pd.DataFrame(rows, columns=list(TRIP_COLUMNS))

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output_path, index=False, columns=list(TRIP_COLUMNS))
    except OSError as e:
        raise DuplicateExportError(
            f"Cannot write duplicates to {output_path}",
            context={'records': len(rows)},
            cause=e
        ) from e

    logger.info(f"Wrote {len(rows)} duplicate records to {output_path}")
    return output_path
