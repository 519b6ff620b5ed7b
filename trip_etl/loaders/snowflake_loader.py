# trip_etl/loaders/snowflake_loader.py
"""
Snowflake bulk loader for the taxi trip ETL pipeline
"""

from datetime import timezone
from typing import Dict, Any, Sequence
from contextlib import contextmanager

import pandas as pd
import snowflake.connector
from snowflake.connector.pandas_tools import write_pandas

from trip_etl.config.settings import SnowflakeConfig
from trip_etl.models.taxi_trip import TaxiTrip, TRIP_COLUMNS
from trip_etl.utils.logger import get_logger
from trip_etl.utils.exceptions import LoaderError


TRIP_TABLE_COLUMNS = """
            tpep_pickup_datetime TIMESTAMP_NTZ NOT NULL,
            tpep_dropoff_datetime TIMESTAMP_NTZ NOT NULL,
            passenger_count INTEGER NOT NULL,
            trip_distance NUMBER(10,2) NOT NULL,
            store_and_fwd_flag VARCHAR(3) NOT NULL,
            PULocationID INTEGER NOT NULL,
            DOLocationID INTEGER NOT NULL,
            fare_amount NUMBER(10,2) NOT NULL,
            tip_amount NUMBER(10,2) NOT NULL,
            trip_duration INTEGER AS (DATEDIFF(second, tpep_pickup_datetime, tpep_dropoff_datetime))
"""


class SnowflakeLoader:
    """
    Bulk sink for validated trips

    Responsibilities:
    - Connection management, one connection per operation
    - Connectivity check before any row is processed
    - Target table provisioning
    - Loading a whole batch of trips in one write_pandas call

    A load either succeeds for the whole batch or raises one LoaderError;
    no partial-batch success is reported.
    """

    def __init__(self, config: SnowflakeConfig):
        """
        Initialize Snowflake loader

        Args:
            config: Snowflake configuration object
        """
        self.config = config
        self.table_name = config.table_name.upper()
        self.logger = get_logger(__name__)

    @contextmanager
    def get_connection(self):
        """
        Context manager for Snowflake database connections

        Ensures proper connection handling and cleanup
        """
        connection = None
        try:
            connection = snowflake.connector.connect(
                account=self.config.account,
                user=self.config.username,
                password=self.config.password,
                warehouse=self.config.warehouse,
                database=self.config.database,
                schema=self.config.schema,
                role=self.config.role
            )
            self.logger.info("Connected to Snowflake successfully")
            yield connection

        except snowflake.connector.errors.Error as e:
            self.logger.error(f"Snowflake operation failed: {str(e)}")
            raise LoaderError(f"Snowflake connection failed: {str(e)}", cause=e) from e

        finally:
            if connection:
                connection.close()
                self.logger.info("Snowflake connection closed")

    def verify_connectivity(self) -> None:
        """
        Check that the destination answers a trivial query

        Raises:
            LoaderError: If the warehouse cannot be reached
        """
        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT 1")
                cursor.fetchone()
                cursor.close()
        except LoaderError:
            raise
        except Exception as e:
            raise LoaderError(
                f"Destination unreachable: {str(e)}",
                error_code="DESTINATION_UNREACHABLE",
                cause=e
            ) from e

        self.logger.info(f"Destination {self.config.database}.{self.config.schema} is reachable")

    def create_trip_table(self) -> bool:
        """
        Create the trip table if it does not exist yet

        Returns:
            True once the table exists

        Raises:
            LoaderError: If table creation fails
        """
        create_table_sql = f"""
        CREATE TABLE IF NOT EXISTS {self.table_name} (
            {TRIP_TABLE_COLUMNS.strip()}
        )
        """

        try:
            with self.get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(create_table_sql)
                cursor.close()

            self.logger.info(f"Successfully created/verified table: {self.table_name}")
            return True

        except Exception as e:
            raise LoaderError(f"Failed to create table {self.table_name}: {str(e)}", cause=e) from e

    @staticmethod
    def build_frame(trips: Sequence[TaxiTrip]) -> pd.DataFrame:
        """
        Build the tabular batch for a bulk write

        Columns follow TRIP_COLUMNS; timestamps are stored as naive UTC.

        Args:
            trips: Localized trips

        Returns:
            DataFrame with one row per trip
        """
        rows = []
        for trip in trips:
            row = trip.to_row()
            for column in ('tpep_pickup_datetime', 'tpep_dropoff_datetime'):
                row[column] = row[column].astimezone(timezone.utc).replace(tzinfo=None)
            rows.append(row)

        frame = pd.DataFrame(rows, columns=list(TRIP_COLUMNS))
        for column in ('tpep_pickup_datetime', 'tpep_dropoff_datetime'):
            frame[column] = pd.to_datetime(frame[column])
        return frame

    def bulk_load(self, trips: Sequence[TaxiTrip]) -> Dict[str, Any]:
        """
        Load all trips into the trip table in one operation

        Args:
            trips: Validated, deduplicated trips

        Returns:
            Dictionary with load statistics

        Raises:
            LoaderError: If the batch is rejected
        """
        if not trips:
            self.logger.warning("No trips to load, skipping bulk load")
            return {"status": "skipped", "loaded_records": 0, "table_name": self.table_name}

        frame = self.build_frame(trips)
        self.logger.info(f"Starting bulk load of {len(frame)} trips into {self.table_name}")

        try:
            with self.get_connection() as conn:
                success, nchunks, nrows, _ = write_pandas(
                    conn=conn,
                    df=frame,
                    table_name=self.table_name,
                    database=self.config.database,
                    schema=self.config.schema,
                    compression='gzip',
                    quote_identifiers=False,
                    use_logical_type=True
                )
        except LoaderError:
            raise
        except Exception as e:
            raise LoaderError(f"Bulk load into {self.table_name} failed: {str(e)}", cause=e) from e

        if not success:
            raise LoaderError(
                f"Bulk load into {self.table_name} was rejected",
                error_code="BATCH_REJECTED",
                context={'records': len(frame), 'chunks': nchunks}
            )

        self.logger.info(f"Inserted {nrows} records into {self.table_name}")
        return {
            "status": "completed",
            "loaded_records": nrows,
            "chunks": nchunks,
            "table_name": self.table_name,
            "load_timestamp": pd.Timestamp.now(tz="UTC").isoformat()
        }
