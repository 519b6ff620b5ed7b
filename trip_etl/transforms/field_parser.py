"""
Typed field extraction for raw trip rows

Turns a RawRow of strings into a TaxiTrip, or into a RejectedRow naming
the first column that could not be decoded.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Mapping

import pandas as pd

from trip_etl.models.row_result import RawRow, ParsedRow, RejectedRow, RejectCode, RowResult
from trip_etl.models.taxi_trip import TaxiTrip, to_money
from trip_etl.utils.logger import get_logger


logger = get_logger(__name__)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class FieldDecodeError(ValueError):
    """A single column value has the wrong shape"""

    def __init__(self, code: RejectCode, column: str, detail: str):
        super().__init__(detail)
        self.code = code
        self.column = column


def _required(fields: Mapping[str, str], column: str) -> str:
    value = fields.get(column, "")
    value = value.strip() if isinstance(value, str) else ""
    if not value:
        raise FieldDecodeError(RejectCode.MISSING_FIELD, column, f"{column} is empty")
    return value


def parse_int(fields: Mapping[str, str], column: str) -> int:
    value = _required(fields, column)
    # int() alone would take "1_0" and non-ASCII digits
    if not _INT_PATTERN.fullmatch(value):
        raise FieldDecodeError(
            RejectCode.INVALID_INT, column, f"{column}={value!r} is not an integer"
        )
    return int(value)


def parse_decimal(fields: Mapping[str, str], column: str) -> Decimal:
    value = _required(fields, column)
    if not _DECIMAL_PATTERN.fullmatch(value):
        raise FieldDecodeError(
            RejectCode.INVALID_DECIMAL, column, f"{column}={value!r} is not a decimal"
        )
    try:
        return to_money(Decimal(value))
    except InvalidOperation:
        # Exponent too large to quantize to cents
        raise FieldDecodeError(
            RejectCode.INVALID_DECIMAL, column, f"{column}={value!r} is out of range"
        )


def parse_timestamp(fields: Mapping[str, str], column: str) -> datetime:
    """
    Parse a naive local wall-clock timestamp

    Any format pandas understands is accepted; values carrying their own
    UTC offset are rejected since the source zone is applied later.
    """
    value = _required(fields, column)
    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError):
        parsed = None
    if parsed is None or pd.isna(parsed):
        raise FieldDecodeError(
            RejectCode.INVALID_TIMESTAMP, column, f"{column}={value!r} is not a timestamp"
        )
    if parsed.tzinfo is not None:
        raise FieldDecodeError(
            RejectCode.INVALID_TIMESTAMP, column, f"{column}={value!r} is not a local time"
        )
    return parsed.to_pydatetime()


def parse_row(raw: RawRow) -> RowResult:
    """
    Decode one raw row into a TaxiTrip

    Args:
        raw: Row as produced by the CSV reader

    Returns:
        ParsedRow on success, RejectedRow naming the failing column otherwise
    """
    if raw.malformed:
        return RejectedRow(
            reason_code=RejectCode.MALFORMED_ROW,
            reason_detail="field count does not match header",
            row_number=raw.row_number,
        )

    fields = raw.fields
    try:
        trip = TaxiTrip(
            pickup_datetime=parse_timestamp(fields, 'tpep_pickup_datetime'),
            dropoff_datetime=parse_timestamp(fields, 'tpep_dropoff_datetime'),
            passenger_count=parse_int(fields, 'passenger_count'),
            trip_distance=parse_decimal(fields, 'trip_distance'),
            store_and_fwd_flag=fields.get('store_and_fwd_flag') or "",
            pickup_location_id=parse_int(fields, 'PULocationID'),
            dropoff_location_id=parse_int(fields, 'DOLocationID'),
            fare_amount=parse_decimal(fields, 'fare_amount'),
            tip_amount=parse_decimal(fields, 'tip_amount'),
        )
    except FieldDecodeError as e:
        return RejectedRow(
            reason_code=e.code,
            reason_detail=str(e),
            row_number=raw.row_number,
            raw_fields=dict(fields),
            column=e.column,
        )

    # Negative counts and distances are loaded as-is
    if trip.passenger_count < 0 or trip.trip_distance < 0:
        logger.debug(
            f"Negative passenger_count/trip_distance on row {raw.row_number}",
            extra={'row_number': raw.row_number}
        )

    return ParsedRow(trip=trip, row_number=raw.row_number)
