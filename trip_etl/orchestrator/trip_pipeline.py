"""
Main orchestrator for the taxi trip ETL pipeline
"""

from pathlib import Path
from typing import Dict, Iterable, List, Any, Optional
from datetime import datetime, timezone
from dataclasses import dataclass, field

from trip_etl.config.settings import Settings
from trip_etl.extractors.csv_reader import TripCsvReader
from trip_etl.loaders.duplicate_writer import write_duplicates
from trip_etl.loaders.snowflake_loader import SnowflakeLoader
from trip_etl.models.row_result import RawRow, RejectedRow
from trip_etl.models.taxi_trip import TaxiTrip
from trip_etl.transforms.deduplication import TripDeduplicator
from trip_etl.transforms.field_parser import parse_row
from trip_etl.transforms.normalizer import normalize_trip
from trip_etl.transforms.timezone import resolve_time_zone, localize_row
from trip_etl.transforms.validator import check_chronology
from trip_etl.utils.logger import get_logger, PerformanceLogger, timed_operation
from trip_etl.utils.exceptions import ErrorCollector, LoaderError


@dataclass
class RunResult:
    """Outcome of one pipeline run"""
    valid_trips: List[TaxiTrip] = field(default_factory=list)
    duplicate_trips: List[TaxiTrip] = field(default_factory=list)
    defect_count: int = 0
    rejects: List[RejectedRow] = field(default_factory=list)
    advisory_count: int = 0
    rows_read: int = 0
    processing_time_seconds: float = 0.0
    load_status: str = "not_loaded"
    loaded_records: int = 0
    load_error: Optional[str] = None
    duplicates_file: Optional[str] = None

    @property
    def valid_count(self) -> int:
        return len(self.valid_trips)

    @property
    def duplicate_count(self) -> int:
        return len(self.duplicate_trips)

    @property
    def status(self) -> str:
        if self.load_status == "failed":
            return "load_failed"
        if self.defect_count:
            return "completed_with_defects"
        return "completed"

    def summary(self) -> Dict[str, Any]:
        """Counts and load outcome for reporting"""
        return {
            'status': self.status,
            'rows_read': self.rows_read,
            'valid_records': self.valid_count,
            'duplicate_records': self.duplicate_count,
            'defect_rows': self.defect_count,
            'pickup_after_dropoff': self.advisory_count,
            'load_status': self.load_status,
            'loaded_records': self.loaded_records,
            'load_error': self.load_error,
            'duplicates_file': self.duplicates_file,
            'processing_time_seconds': self.processing_time_seconds,
            'rejects': [reject.to_dict() for reject in self.rejects],
        }


class TripEtlPipeline:
    """
    Orchestrates one ETL run over a trip CSV file

    Per row, in file order:
    parse -> normalize -> convert to UTC -> chronology check -> dedup.

    Parse and conversion failures drop only the row and count it as a
    defect; chronology problems are logged and the trip keeps going.
    The valid and duplicate sequences are held in memory until the row
    source is exhausted.
    """

    def __init__(self, settings: Settings, loader: Optional[SnowflakeLoader] = None):
        """
        Initialize the pipeline

        Args:
            settings: Run configuration
            loader: Bulk sink, built from settings when omitted

        Raises:
            ConfigurationError: If the source time zone cannot be resolved
        """
        self.settings = settings
        self.logger = get_logger(__name__)
        self.performance_logger = PerformanceLogger(__name__)

        # Resolved once; an unknown zone fails the whole run here
        self.zone = resolve_time_zone(settings.pipeline.source_time_zone)
        self.ambiguous_policy = settings.pipeline.ambiguous_time_policy
        self._loader = loader

        self.logger.info(f"Pipeline initialized for source zone {self.zone.key}")

    @property
    def loader(self) -> SnowflakeLoader:
        if self._loader is None:
            self._loader = SnowflakeLoader(self.settings.snowflake)
        return self._loader

    def process_rows(self, rows: Iterable[RawRow]) -> RunResult:
        """
        Classify every row of a row source

        Args:
            rows: Raw rows in file order

        Returns:
            RunResult with the valid and duplicate partitions and defect count
        """
        start_time = datetime.now(timezone.utc)
        result = RunResult()
        deduplicator = TripDeduplicator()
        collector = ErrorCollector()

        for raw in rows:
            result.rows_read += 1

            outcome = parse_row(raw)
            if not outcome.ok:
                self._record_defect(result, collector, outcome)
                continue

            normalize_trip(outcome.trip)

            outcome = localize_row(outcome, self.zone, self.ambiguous_policy)
            if not outcome.ok:
                self._record_defect(result, collector, outcome)
                continue

            trip = outcome.trip

            if not check_chronology(trip, raw.row_number, self.logger):
                result.advisory_count += 1
                collector.add_warning("pickup after dropoff", {'row_number': raw.row_number})

            deduplicator.classify(trip)

        result.valid_trips = deduplicator.unique
        result.duplicate_trips = deduplicator.duplicates
        result.processing_time_seconds = (datetime.now(timezone.utc) - start_time).total_seconds()

        self._report(result, collector)
        return result

    def process_file(self, file_path: Path) -> RunResult:
        """
        Read and classify a trip CSV file

        Raises:
            DataSourceError: If the file is missing, unreadable or lacks columns
        """
        file_path = Path(file_path)
        self.logger.info(f"Processing {file_path}")

        with timed_operation("process_file", self.logger):
            with TripCsvReader(file_path) as reader:
                return self.process_rows(reader.rows())

    def export_duplicates(self, result: RunResult) -> Optional[Path]:
        """Write the duplicate partition when the run option asks for it"""
        if not self.settings.pipeline.export_duplicates:
            return None
        if not result.duplicate_trips:
            return None

        path = write_duplicates(result.duplicate_trips, self.settings.pipeline.duplicates_path)
        result.duplicates_file = str(path)
        self.logger.info(
            f"Found and removed {result.duplicate_count} duplicate records, written to {path}"
        )
        return path

    def load(self, result: RunResult) -> RunResult:
        """
        Bulk-load the valid partition

        A rejected batch is reported on the result rather than raised, so
        the classification counts still reach the operator.
        """
        try:
            with timed_operation("bulk_load", self.logger):
                stats = self.loader.bulk_load(result.valid_trips)
        except LoaderError as e:
            result.load_status = "failed"
            result.load_error = str(e)
            self.logger.error(f"Error during bulk insertion: {e.message}", extra={'error_code': e.error_code})
            return result

        result.load_status = stats['status']
        result.loaded_records = stats['loaded_records']
        return result

    def run(self, file_path: Path, load: bool = True) -> RunResult:
        """
        Full job: check destination, process, export duplicates, load

        Args:
            file_path: Input CSV file
            load: Skip the destination entirely when False

        Raises:
            LoaderError: If the destination is unreachable before processing
            DataSourceError: If the input cannot be read
            DuplicateExportError: If the duplicates file cannot be written
        """
        if load:
            self.loader.verify_connectivity()
            self.loader.create_trip_table()

        result = self.process_file(file_path)
        self.export_duplicates(result)

        if load:
            self.load(result)

        self.performance_logger.log_data_metrics(
            rows_read=result.rows_read,
            valid_records=result.valid_count,
            duplicate_records=result.duplicate_count,
            defect_rows=result.defect_count,
            loaded_records=result.loaded_records,
            load_status=result.load_status
        )
        return result

    def _record_defect(
        self,
        result: RunResult,
        collector: ErrorCollector,
        reject: RejectedRow
    ) -> None:
        result.defect_count += 1
        result.rejects.append(reject)
        collector.add_error(reject.reason_detail, reject.to_dict())
        self.logger.error(
            f"Error processing row {reject.row_number}: {reject.reason_detail}",
            extra={'row_number': reject.row_number, 'reason_code': reject.reason_code.value}
        )

    def _report(self, result: RunResult, collector: ErrorCollector) -> None:
        summary = collector.get_summary()
        self.logger.info(f"Rows with defects found: {result.defect_count}")
        if result.duplicate_count:
            self.logger.info(f"Duplicate records found: {result.duplicate_count}")
        else:
            self.logger.info("No duplicate records found")
        self.logger.info(
            f"Classified {result.rows_read} rows: {result.valid_count} valid, "
            f"{result.duplicate_count} duplicate, {result.defect_count} defective",
            extra={
                'valid_records': result.valid_count,
                'duplicate_records': result.duplicate_count,
                'defect_rows': summary['error_count'],
                'pickup_after_dropoff': summary['warning_count'],
            }
        )
