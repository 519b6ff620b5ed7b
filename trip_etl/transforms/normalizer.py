"""Field cleanup for parsed trips"""

from trip_etl.models.taxi_trip import TaxiTrip


FLAG_CODES = {
    'N': 'No',
    'Y': 'Yes',
}


def normalize_store_and_fwd_flag(value: str) -> str:
    """
    Map the one-letter store-and-forward code to "Yes"/"No"

    Any other value is returned trimmed but otherwise untouched.
    """
    if not value:
        return value
    trimmed = value.strip()
    return FLAG_CODES.get(trimmed.upper(), trimmed)


def normalize_trip(trip: TaxiTrip) -> TaxiTrip:
    trip.store_and_fwd_flag = normalize_store_and_fwd_flag(trip.store_and_fwd_flag)
    return trip
