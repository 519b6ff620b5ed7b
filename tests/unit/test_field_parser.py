# tests/unit/test_field_parser.py
"""Tests for typed field extraction."""

import pytest
from datetime import datetime
from decimal import Decimal

from trip_etl.models.row_result import RawRow, ParsedRow, RejectedRow, RejectCode
from trip_etl.transforms.field_parser import parse_row


def raw_row(row_number=2, **overrides):
    fields = {
        'tpep_pickup_datetime': '2024-01-15 08:30:00',
        'tpep_dropoff_datetime': '2024-01-15 08:45:00',
        'passenger_count': '1',
        'trip_distance': '1.5',
        'store_and_fwd_flag': 'N',
        'PULocationID': '161',
        'DOLocationID': '236',
        'fare_amount': '9',
        'tip_amount': '2.005',
    }
    fields.update(overrides)
    return RawRow(row_number=row_number, fields=fields)


class TestParseRowSuccess:
    """Test rows that decode."""

    def test_parses_all_fields(self):
        outcome = parse_row(raw_row())

        assert isinstance(outcome, ParsedRow)
        assert outcome.ok
        trip = outcome.trip
        assert trip.pickup_datetime == datetime(2024, 1, 15, 8, 30)
        assert trip.dropoff_datetime == datetime(2024, 1, 15, 8, 45)
        assert trip.passenger_count == 1
        assert trip.pickup_location_id == 161
        assert trip.dropoff_location_id == 236
        assert trip.store_and_fwd_flag == 'N'

    def test_decimals_have_two_fractional_digits(self):
        trip = parse_row(raw_row()).trip

        assert trip.trip_distance == Decimal('1.50')
        assert str(trip.trip_distance) == '1.50'
        assert str(trip.fare_amount) == '9.00'
        assert trip.tip_amount == Decimal('2.01')

    def test_timestamps_stay_naive(self):
        trip = parse_row(raw_row()).trip
        assert trip.pickup_datetime.tzinfo is None
        assert not trip.is_localized

    def test_accepts_twelve_hour_format(self):
        outcome = parse_row(raw_row(tpep_pickup_datetime='01/15/2024 08:30:00 AM'))
        assert outcome.trip.pickup_datetime == datetime(2024, 1, 15, 8, 30)

    def test_empty_flag_is_allowed(self):
        outcome = parse_row(raw_row(store_and_fwd_flag=''))
        assert outcome.ok
        assert outcome.trip.store_and_fwd_flag == ''

    def test_negative_values_pass_through(self):
        outcome = parse_row(raw_row(passenger_count='-1', trip_distance='-3.2'))

        assert outcome.ok
        assert outcome.trip.passenger_count == -1
        assert outcome.trip.trip_distance == Decimal('-3.20')


class TestParseRowRejects:
    """Test rows that are dropped as defects."""

    def test_non_numeric_passenger_count(self):
        outcome = parse_row(raw_row(row_number=5, passenger_count='two'))

        assert isinstance(outcome, RejectedRow)
        assert not outcome.ok
        assert outcome.reason_code == RejectCode.INVALID_INT
        assert outcome.column == 'passenger_count'
        assert outcome.row_number == 5

    def test_fractional_passenger_count_is_not_an_integer(self):
        outcome = parse_row(raw_row(passenger_count='1.0'))
        assert outcome.reason_code == RejectCode.INVALID_INT

    @pytest.mark.parametrize("value", ['far', 'NaN', 'Infinity', '1,5'])
    def test_invalid_distance(self, value):
        outcome = parse_row(raw_row(trip_distance=value))

        assert outcome.reason_code == RejectCode.INVALID_DECIMAL
        assert outcome.column == 'trip_distance'

    def test_invalid_timestamp(self):
        outcome = parse_row(raw_row(tpep_dropoff_datetime='not a date'))

        assert outcome.reason_code == RejectCode.INVALID_TIMESTAMP
        assert outcome.column == 'tpep_dropoff_datetime'

    def test_timestamp_with_offset_is_rejected(self):
        outcome = parse_row(raw_row(tpep_pickup_datetime='2024-01-15T08:30:00+02:00'))
        assert outcome.reason_code == RejectCode.INVALID_TIMESTAMP

    def test_missing_value(self):
        outcome = parse_row(raw_row(fare_amount='  '))

        assert outcome.reason_code == RejectCode.MISSING_FIELD
        assert outcome.column == 'fare_amount'

    def test_malformed_row(self):
        outcome = parse_row(RawRow(row_number=9, fields={}, malformed=True))

        assert outcome.reason_code == RejectCode.MALFORMED_ROW
        assert outcome.row_number == 9

    def test_reject_keeps_raw_fields(self):
        outcome = parse_row(raw_row(passenger_count='x'))
        assert outcome.raw_fields['passenger_count'] == 'x'
        assert outcome.to_dict()['reason_code'] == 'invalid_int'

    @pytest.mark.parametrize("value", ['1_0', '٣', '+', '1e2'])
    def test_passenger_count_must_be_plain_digits(self, value):
        outcome = parse_row(raw_row(passenger_count=value))

        assert outcome.reason_code == RejectCode.INVALID_INT
        assert outcome.column == 'passenger_count'

    @pytest.mark.parametrize("value", ['1_000.50', '9.5_0', '٣.5', '1e999999999'])
    def test_decimal_must_be_plain_digits(self, value):
        outcome = parse_row(raw_row(fare_amount=value))

        assert outcome.reason_code == RejectCode.INVALID_DECIMAL
        assert outcome.column == 'fare_amount'

    def test_signed_and_exponent_decimals_accepted(self):
        trip = parse_row(raw_row(tip_amount='+2.5', fare_amount='1.5E1', passenger_count='+2')).trip

        assert trip.tip_amount == Decimal('2.50')
        assert trip.fare_amount == Decimal('15.00')
        assert trip.passenger_count == 2
