# tests/unit/conftest.py
"""
Shared pytest fixtures for the taxi trip ETL tests
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from unittest.mock import Mock

from trip_etl.config.settings import SnowflakeConfig, PipelineConfig, Settings
from trip_etl.models.taxi_trip import TaxiTrip, TRIP_COLUMNS


HEADER = ",".join(TRIP_COLUMNS)


def csv_line(pickup, dropoff, passengers="1", distance="1.50", flag="N",
             pu="161", do="236", fare="9.00", tip="2.00"):
    """Build one data line in TRIP_COLUMNS order"""
    return ",".join([pickup, dropoff, passengers, distance, flag, pu, do, fare, tip])


@pytest.fixture
def snowflake_config():
    """Create Snowflake configuration for testing"""
    return SnowflakeConfig(
        account="test_account",
        username="test_user",
        password="test_password",
        warehouse="test_warehouse",
        database="test_database",
        schema="test_schema",
        role="test_role",
        table_name="test_trips"
    )


@pytest.fixture
def pipeline_config(tmp_path):
    """Run options writing duplicates under tmp_path"""
    return PipelineConfig(
        source_time_zone="America/New_York",
        export_duplicates=False,
        duplicates_path=tmp_path / "duplicates.csv"
    )


@pytest.fixture
def settings(snowflake_config, pipeline_config):
    return Settings(snowflake=snowflake_config, pipeline=pipeline_config)


@pytest.fixture
def mock_loader():
    """Bulk sink stand-in that accepts every batch"""
    loader = Mock()
    loader.bulk_load.side_effect = lambda trips: {
        "status": "completed",
        "loaded_records": len(trips),
        "table_name": "TEST_TRIPS"
    }
    return loader


@pytest.fixture
def write_csv(tmp_path):
    """Factory writing a trip CSV file from data lines"""
    def _write(lines, name="trips.csv", header=HEADER):
        path = tmp_path / name
        path.write_text("\n".join([header, *lines]) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def five_row_lines():
    """Rows 2 and 4 share a key; row 3 has a bad distance"""
    return [
        csv_line("2024-01-15 08:30:00", "2024-01-15 08:45:00", passengers="1"),
        csv_line("2024-01-15 09:00:00", "2024-01-15 09:20:00", passengers="2"),
        csv_line("2024-01-15 10:00:00", "2024-01-15 10:10:00", distance="far"),
        csv_line("2024-01-15 09:00:00", "2024-01-15 09:20:00", passengers="2",
                 distance="7.25", fare="31.00", pu="48", do="68"),
        csv_line("2024-01-15 11:00:00", "2024-01-15 11:30:00", passengers="3"),
    ]


@pytest.fixture
def make_trip():
    """Factory for localized trips"""
    def _make(pickup=datetime(2024, 1, 15, 13, 30, tzinfo=timezone.utc),
              dropoff=datetime(2024, 1, 15, 13, 45, tzinfo=timezone.utc),
              passenger_count=1, **overrides):
        values = dict(
            pickup_datetime=pickup,
            dropoff_datetime=dropoff,
            passenger_count=passenger_count,
            trip_distance=Decimal("1.50"),
            store_and_fwd_flag="No",
            pickup_location_id=161,
            dropoff_location_id=236,
            fare_amount=Decimal("9.00"),
            tip_amount=Decimal("2.00"),
        )
        values.update(overrides)
        return TaxiTrip(**values)
    return _make
