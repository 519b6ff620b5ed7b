"""
Command-line interface for the taxi trip ETL pipeline

Usage Examples:
    # Load a trip file into the warehouse
    taxi-trip-etl data/sample.csv

    # Also write the duplicate rows to a side file
    taxi-trip-etl data/sample.csv --export-duplicates --duplicates-path out/duplicates.csv

    # Classify only, without touching the warehouse
    taxi-trip-etl data/sample.csv --no-load --output-format json

    # Run with debug logging
    taxi-trip-etl data/sample.csv --log-level DEBUG
"""

import argparse
import json
import sys
from dataclasses import replace
from typing import List, Optional

from dotenv import load_dotenv

from trip_etl.config.settings import Settings, AMBIGUOUS_TIME_POLICIES
from trip_etl.orchestrator.trip_pipeline import TripEtlPipeline, RunResult
from trip_etl.utils.logger import setup_pipeline_logging, get_logger
from trip_etl.utils.exceptions import PipelineError, ConfigurationError


EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_PIPELINE_ERROR = 2
EXIT_LOAD_FAILED = 3
EXIT_INTERRUPTED = 130


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Taxi trip CSV ETL pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        'csv_path',
        help='Path of the trip CSV file to process'
    )

    parser.add_argument(
        '--export-duplicates',
        action='store_true',
        default=None,
        help='Write duplicate records to a secondary CSV file'
    )

    parser.add_argument(
        '--duplicates-path',
        help='Destination of the duplicates file (default: duplicates.csv)'
    )

    parser.add_argument(
        '--time-zone',
        help='IANA zone of the source timestamps (default: America/New_York)'
    )

    parser.add_argument(
        '--ambiguous-time',
        choices=AMBIGUOUS_TIME_POLICIES,
        help='How to treat local times repeated at the end of daylight saving (default: raise)'
    )

    parser.add_argument(
        '--no-load',
        action='store_true',
        help='Classify and export only; do not connect to the warehouse'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )

    parser.add_argument(
        '--log-dir',
        type=str,
        help='Directory for log files (default: console only)'
    )

    parser.add_argument(
        '--output-format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """Load settings from the environment and apply command line overrides"""
    settings = Settings.from_env()

    overrides = {
        'export_duplicates': args.export_duplicates,
        'duplicates_path': args.duplicates_path,
        'source_time_zone': args.time_zone,
        'ambiguous_time_policy': args.ambiguous_time,
        'log_level': args.log_level,
        'log_dir': args.log_dir,
    }
    settings.pipeline = replace(
        settings.pipeline,
        **{key: value for key, value in overrides.items() if value is not None}
    )

    if not args.no_load and not settings.validate():
        raise ConfigurationError(
            "Missing Snowflake credentials - set SNOWFLAKE_ACCOUNT, "
            "SNOWFLAKE_USERNAME and SNOWFLAKE_PASSWORD or use --no-load"
        )
    return settings


def print_results(result: RunResult, output_format: str) -> None:
    """Print run results"""
    summary = result.summary()
    if output_format == 'json':
        print(json.dumps(summary, indent=2, default=str))
        return

    print("=== ETL Results ===")
    print(f"Status: {summary['status']}")
    print(f"Rows Read: {result.rows_read:,}")
    print(f"Valid Records: {result.valid_count:,}")
    print(f"Duplicate Records: {result.duplicate_count:,}")
    print(f"Rows With Defects: {result.defect_count:,}")
    print(f"Pickup After Dropoff: {result.advisory_count:,}")
    print(f"Load Status: {result.load_status}")
    if result.load_status == "completed":
        print(f"Inserted Records: {result.loaded_records:,}")
    if result.load_error:
        print(f"Load Error: {result.load_error}")
    if result.duplicates_file:
        print(f"Duplicates File: {result.duplicates_file}")

    if result.rejects:
        for reject in result.rejects[:3]:
            print(f"  - row {reject.row_number}: {reject.reason_detail}")
        if len(result.rejects) > 3:
            print(f"  ... and {len(result.rejects) - 3} more defects")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_arguments(argv)
    load_dotenv()

    try:
        settings = build_settings(args)
        setup_pipeline_logging(
            log_level=settings.pipeline.log_level,
            log_dir=settings.pipeline.log_dir
        )
        logger = get_logger(__name__)
        logger.info("Starting taxi trip ETL")

        pipeline = TripEtlPipeline(settings)
        result = pipeline.run(args.csv_path, load=not args.no_load)

        print_results(result, args.output_format)

        if result.load_status == "failed":
            logger.error("Run finished but the bulk load failed")
            return EXIT_LOAD_FAILED

        logger.info("Run completed")
        return EXIT_OK

    except ConfigurationError as e:
        get_logger(__name__).error(str(e))
        print(f"Configuration Error: {e}")
        return EXIT_CONFIG_ERROR

    except PipelineError as e:
        get_logger(__name__).error(str(e))
        print(f"Pipeline Error: {e}")
        return EXIT_PIPELINE_ERROR

    except KeyboardInterrupt:
        print("\nRun interrupted by user")
        return EXIT_INTERRUPTED


if __name__ == '__main__':
    sys.exit(main())
