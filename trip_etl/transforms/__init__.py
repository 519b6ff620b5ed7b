"""Row-level transforms"""

from .field_parser import parse_row
from .normalizer import normalize_store_and_fwd_flag, normalize_trip
from .timezone import resolve_time_zone, to_utc, localize_trip, localize_row
from .validator import check_chronology
from .deduplication import identity_key, TripDeduplicator

__all__ = [
    'parse_row', 'normalize_store_and_fwd_flag', 'normalize_trip',
    'resolve_time_zone', 'to_utc', 'localize_trip', 'localize_row', 'check_chronology',
    'identity_key', 'TripDeduplicator'
]
