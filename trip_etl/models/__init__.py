"""Data models"""

from .taxi_trip import TaxiTrip, TRIP_COLUMNS, COLUMN_TO_FIELD, to_money
from .row_result import RawRow, ParsedRow, RejectedRow, RejectCode, RowResult

__all__ = [
    'TaxiTrip', 'TRIP_COLUMNS', 'COLUMN_TO_FIELD', 'to_money',
    'RawRow', 'ParsedRow', 'RejectedRow', 'RejectCode', 'RowResult'
]
