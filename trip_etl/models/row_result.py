"""
Per-row outcome types

A row either parses into a TaxiTrip or is rejected with a reason; the
orchestrator branches on the outcome instead of catching exceptions.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Union

from trip_etl.models.taxi_trip import TaxiTrip


class RejectCode(str, Enum):
    """Typed rejection classifications"""
    MALFORMED_ROW = "malformed_row"
    MISSING_FIELD = "missing_field"
    INVALID_INT = "invalid_int"
    INVALID_DECIMAL = "invalid_decimal"
    INVALID_TIMESTAMP = "invalid_timestamp"
    TIME_CONVERSION = "time_conversion"


@dataclass(frozen=True)
class RawRow:
    """One decoded line of the input file"""
    row_number: int  # physical line number, header is line 1
    fields: Mapping[str, str]
    malformed: bool = False


@dataclass(frozen=True)
class ParsedRow:
    """Row that produced a trip"""
    trip: TaxiTrip
    row_number: int

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class RejectedRow:
    """Row dropped as a defect"""
    reason_code: RejectCode
    reason_detail: str
    row_number: int
    raw_fields: Mapping[str, str] = field(default_factory=dict)
    column: Optional[str] = None

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self):
        return {
            'row_number': self.row_number,
            'reason_code': self.reason_code.value,
            'reason_detail': self.reason_detail,
            'column': self.column,
        }


RowResult = Union[ParsedRow, RejectedRow]
