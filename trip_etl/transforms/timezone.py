"""
Local wall-clock to UTC conversion

The source zone is resolved once per run; each timestamp is then
localized with pandas, which applies the standard or daylight offset
in force on that date.
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

from trip_etl.models.row_result import ParsedRow, RejectedRow, RejectCode, RowResult
from trip_etl.models.taxi_trip import TaxiTrip
from trip_etl.utils.exceptions import ConfigurationError, TimeConversionError


# AMBIGUOUS_TIME_POLICY -> pandas ``ambiguous`` argument (True means daylight time)
_AMBIGUOUS_ARGS = {
    'raise': 'raise',
    'standard': False,
    'daylight': True,
}


def resolve_time_zone(name: str) -> ZoneInfo:
    """
    Resolve an IANA zone name

    Raises:
        ConfigurationError: If the zone is unknown; the run cannot start
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(
            f"Cannot resolve time zone {name!r}",
            error_code="UNKNOWN_TIME_ZONE",
            cause=e
        ) from e


def to_utc(local: datetime, zone: ZoneInfo, ambiguous: str = 'raise') -> datetime:
    """
    Convert a naive local timestamp in ``zone`` to an aware UTC datetime

    Args:
        local: Naive wall-clock value
        zone: Resolved source zone
        ambiguous: 'raise', 'standard' or 'daylight' for the repeated
            hour at the end of daylight saving time

    Returns:
        The same instant with tzinfo=UTC

    Raises:
        TimeConversionError: If the value falls in the spring-forward gap,
            is ambiguous under the 'raise' policy, or is already aware
    """
    if local.tzinfo is not None:
        raise TimeConversionError(f"Expected a naive timestamp, got {local.isoformat()}")

    try:
        localized = pd.Timestamp(local).tz_localize(
            zone,
            ambiguous=_AMBIGUOUS_ARGS[ambiguous],
            nonexistent='raise'
        )
    except Exception as e:
        raise TimeConversionError(
            f"{local.isoformat()} has no single instant in {zone.key}",
            error_code="INVALID_LOCAL_TIME",
            context={'local_time': local.isoformat(), 'zone': zone.key},
            cause=e
        ) from e

    return localized.tz_convert(timezone.utc).to_pydatetime()


def localize_trip(trip: TaxiTrip, zone: ZoneInfo, ambiguous: str = 'raise') -> TaxiTrip:
    """Convert both trip timestamps to UTC; the trip is left untouched on failure"""
    pickup = to_utc(trip.pickup_datetime, zone, ambiguous)
    dropoff = to_utc(trip.dropoff_datetime, zone, ambiguous)
    trip.pickup_datetime = pickup
    trip.dropoff_datetime = dropoff
    return trip


def localize_row(parsed: ParsedRow, zone: ZoneInfo, ambiguous: str = 'raise') -> RowResult:
    """
    Localize a parsed row's trip, turning a conversion failure into a reject

    Returns:
        The same ParsedRow with UTC timestamps, or a RejectedRow
    """
    try:
        localize_trip(parsed.trip, zone, ambiguous)
    except TimeConversionError as e:
        return RejectedRow(
            reason_code=RejectCode.TIME_CONVERSION,
            reason_detail=e.message,
            row_number=parsed.row_number,
        )
    return parsed
