# trip_etl/models/taxi_trip.py
"""
Data model for taxi trip records
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Any, Tuple


# Column order of the input file, the warehouse table and the duplicates export
TRIP_COLUMNS: Tuple[str, ...] = (
    'tpep_pickup_datetime',
    'tpep_dropoff_datetime',
    'passenger_count',
    'trip_distance',
    'store_and_fwd_flag',
    'PULocationID',
    'DOLocationID',
    'fare_amount',
    'tip_amount',
)

# Column name -> TaxiTrip attribute
COLUMN_TO_FIELD: Dict[str, str] = {
    'tpep_pickup_datetime': 'pickup_datetime',
    'tpep_dropoff_datetime': 'dropoff_datetime',
    'passenger_count': 'passenger_count',
    'trip_distance': 'trip_distance',
    'store_and_fwd_flag': 'store_and_fwd_flag',
    'PULocationID': 'pickup_location_id',
    'DOLocationID': 'dropoff_location_id',
    'fare_amount': 'fare_amount',
    'tip_amount': 'tip_amount',
}

CENTS = Decimal('0.01')


def to_money(value: Decimal) -> Decimal:
    """Quantize to the two fractional digits of a DECIMAL(10,2) column"""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass
class TaxiTrip:
    """
    One parsed trip row

    Timestamps hold naive local wall-clock values right after parsing
    and timezone-aware UTC instants once the record has been localized.
    Amounts and distance are Decimals with two fractional digits.
    """

    pickup_datetime: datetime
    dropoff_datetime: datetime
    passenger_count: int
    trip_distance: Decimal
    store_and_fwd_flag: str
    pickup_location_id: int
    dropoff_location_id: int
    fare_amount: Decimal
    tip_amount: Decimal

    @property
    def is_localized(self) -> bool:
        """Both timestamps carry a timezone"""
        return (self.pickup_datetime.tzinfo is not None
                and self.dropoff_datetime.tzinfo is not None)

    @property
    def trip_duration_seconds(self) -> int:
        """Whole seconds from pickup to dropoff, negative for inverted trips"""
        return int((self.dropoff_datetime - self.pickup_datetime).total_seconds())

    @property
    def is_chronological(self) -> bool:
        """Pickup is not later than dropoff"""
        return self.pickup_datetime <= self.dropoff_datetime

    def to_row(self) -> Dict[str, Any]:
        """Convert trip to a column-name keyed row in TRIP_COLUMNS order"""
        return {column: getattr(self, attr) for column, attr in COLUMN_TO_FIELD.items()}
