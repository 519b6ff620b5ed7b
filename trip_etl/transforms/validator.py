"""Advisory consistency checks on localized trips"""

import logging
from typing import Optional

from trip_etl.models.taxi_trip import TaxiTrip
from trip_etl.utils.logger import get_logger


logger = get_logger(__name__)


def check_chronology(
    trip: TaxiTrip,
    row_number: int,
    log: Optional[logging.Logger] = None
) -> bool:
    """
    Warn when pickup is strictly later than dropoff

    The trip is never dropped or changed; callers keep routing it.

    Args:
        trip: Trip with UTC timestamps
        row_number: Source line for the diagnostic
        log: Logger to warn on (module logger by default)

    Returns:
        True if the trip is chronological
    """
    if trip.is_chronological:
        return True

    (log or logger).warning(
        f"Pickup after dropoff on row {row_number}: "
        f"pickup={trip.pickup_datetime.isoformat()} dropoff={trip.dropoff_datetime.isoformat()}",
        extra={
            'row_number': row_number,
            'pickup_utc': trip.pickup_datetime.isoformat(),
            'dropoff_utc': trip.dropoff_datetime.isoformat(),
        }
    )
    return False
