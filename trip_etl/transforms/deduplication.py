"""Exact-key trip deduplication.

Two trips are the same ride when their UTC pickup and dropoff instants
(to the second) and their passenger count match. The first occurrence in
file order is kept; every later one is a duplicate.
"""

from typing import List, Set

from trip_etl.models.taxi_trip import TaxiTrip


KEY_TIME_FORMAT = "%Y%m%d%H%M%S"


def identity_key(trip: TaxiTrip) -> str:
    """Build the dedup key of a localized trip.

    Args:
        trip: Trip with UTC timestamps.

    Returns:
        ``"<pickup>_<dropoff>_<passenger_count>"`` with second-precision times.
    """
    return (
        f"{trip.pickup_datetime.strftime(KEY_TIME_FORMAT)}_"
        f"{trip.dropoff_datetime.strftime(KEY_TIME_FORMAT)}_"
        f"{trip.passenger_count}"
    )


class TripDeduplicator:
    """Splits trips into first-seen and repeat sequences for one run."""

    def __init__(self):
        self.unique: List[TaxiTrip] = []
        self.duplicates: List[TaxiTrip] = []
        self._seen_keys: Set[str] = set()

    def classify(self, trip: TaxiTrip) -> bool:
        """Route a trip by its identity key.

        Args:
            trip: Trip with UTC timestamps.

        Returns:
            True if the trip was first-seen and kept, False if it is a duplicate.
        """
        key = identity_key(trip)
        if key in self._seen_keys:
            self.duplicates.append(trip)
            return False
        self._seen_keys.add(key)
        self.unique.append(trip)
        return True

    @property
    def seen_count(self) -> int:
        return len(self._seen_keys)
