# tests/unit/test_cli.py
"""
Unit tests for the command-line entry point
"""

import json
import os
import pytest
from pathlib import Path
from unittest.mock import patch

from trip_etl import cli
from trip_etl.orchestrator.trip_pipeline import RunResult
from trip_etl.utils.exceptions import ConfigurationError, LoaderError


CREDENTIALS = {
    'SNOWFLAKE_ACCOUNT': 'acct',
    'SNOWFLAKE_USERNAME': 'loader',
    'SNOWFLAKE_PASSWORD': 'secret',
}


@pytest.fixture
def quiet_cli():
    """Keep main() away from .env files and root logging handlers"""
    with patch('trip_etl.cli.load_dotenv'), patch('trip_etl.cli.setup_pipeline_logging'):
        yield


class TestParseArguments:
    """Test argument parsing"""

    def test_defaults(self):
        args = cli.parse_arguments(['trips.csv'])

        assert args.csv_path == 'trips.csv'
        assert args.export_duplicates is None
        assert args.no_load is False
        assert args.output_format == 'text'

    def test_rejects_unknown_ambiguous_policy(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments(['trips.csv', '--ambiguous-time', 'earliest'])


class TestBuildSettings:
    """Test environment plus override merging"""

    def test_overrides_win_over_environment(self):
        args = cli.parse_arguments([
            'trips.csv', '--export-duplicates', '--duplicates-path', 'out/d.csv',
            '--time-zone', 'America/Chicago', '--ambiguous-time', 'daylight'
        ])
        env = dict(CREDENTIALS, SOURCE_TIME_ZONE='Europe/London', EXPORT_DUPLICATES='false')

        with patch.dict(os.environ, env, clear=True):
            settings = cli.build_settings(args)

        assert settings.pipeline.export_duplicates is True
        assert settings.pipeline.duplicates_path == Path('out/d.csv')
        assert settings.pipeline.source_time_zone == 'America/Chicago'
        assert settings.pipeline.ambiguous_time_policy == 'daylight'

    def test_environment_used_when_no_override(self):
        args = cli.parse_arguments(['trips.csv'])

        with patch.dict(os.environ, dict(CREDENTIALS, EXPORT_DUPLICATES='true'), clear=True):
            settings = cli.build_settings(args)

        assert settings.pipeline.export_duplicates is True

    def test_missing_credentials(self):
        args = cli.parse_arguments(['trips.csv'])

        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError):
                cli.build_settings(args)

    def test_missing_credentials_allowed_without_load(self):
        args = cli.parse_arguments(['trips.csv', '--no-load'])

        with patch.dict(os.environ, {}, clear=True):
            assert cli.build_settings(args).validate() is False


class TestMain:
    """Test exit codes and output"""

    def test_no_load_run_prints_counts(self, quiet_cli, write_csv, five_row_lines, capsys):
        path = write_csv(five_row_lines)

        with patch.dict(os.environ, {}, clear=True):
            exit_code = cli.main([str(path), '--no-load'])

        out = capsys.readouterr().out
        assert exit_code == cli.EXIT_OK
        assert "Valid Records: 3" in out
        assert "Duplicate Records: 1" in out
        assert "Rows With Defects: 1" in out
        assert "row 4" in out

    def test_json_output(self, quiet_cli, write_csv, five_row_lines, capsys):
        path = write_csv(five_row_lines)

        with patch.dict(os.environ, {}, clear=True):
            cli.main([str(path), '--no-load', '--output-format', 'json'])

        summary = json.loads(capsys.readouterr().out)
        assert summary['valid_records'] == 3
        assert summary['load_status'] == "not_loaded"

    def test_configuration_error_exit_code(self, quiet_cli, capsys):
        with patch.dict(os.environ, {}, clear=True):
            exit_code = cli.main(['trips.csv'])

        assert exit_code == cli.EXIT_CONFIG_ERROR
        assert "Configuration Error" in capsys.readouterr().out

    def test_unknown_time_zone_exit_code(self, quiet_cli, write_csv, five_row_lines):
        path = write_csv(five_row_lines)

        with patch.dict(os.environ, {}, clear=True):
            exit_code = cli.main([str(path), '--no-load', '--time-zone', 'Mars/Olympus'])

        assert exit_code == cli.EXIT_CONFIG_ERROR

    def test_missing_input_exit_code(self, quiet_cli, tmp_path):
        with patch.dict(os.environ, {}, clear=True):
            exit_code = cli.main([str(tmp_path / "absent.csv"), '--no-load'])

        assert exit_code == cli.EXIT_PIPELINE_ERROR

    @patch('trip_etl.cli.TripEtlPipeline')
    def test_unreachable_destination_exit_code(self, mock_pipeline, quiet_cli):
        mock_pipeline.return_value.run.side_effect = LoaderError("Destination unreachable")

        with patch.dict(os.environ, CREDENTIALS, clear=True):
            exit_code = cli.main(['trips.csv'])

        assert exit_code == cli.EXIT_PIPELINE_ERROR

    @patch('trip_etl.cli.TripEtlPipeline')
    def test_load_failure_exit_code(self, mock_pipeline, quiet_cli, capsys):
        mock_pipeline.return_value.run.return_value = RunResult(
            load_status="failed", load_error="BATCH_REJECTED: rejected"
        )

        with patch.dict(os.environ, CREDENTIALS, clear=True):
            exit_code = cli.main(['trips.csv'])

        assert exit_code == cli.EXIT_LOAD_FAILED
        assert "Load Error: BATCH_REJECTED" in capsys.readouterr().out

    @patch('trip_etl.cli.TripEtlPipeline')
    def test_run_passes_load_flag(self, mock_pipeline, quiet_cli):
        mock_pipeline.return_value.run.return_value = RunResult()

        with patch.dict(os.environ, CREDENTIALS, clear=True):
            cli.main(['trips.csv'])

        mock_pipeline.return_value.run.assert_called_once_with('trips.csv', load=True)

    @patch('trip_etl.cli.TripEtlPipeline')
    def test_interrupt_exit_code(self, mock_pipeline, quiet_cli):
        mock_pipeline.return_value.run.side_effect = KeyboardInterrupt

        with patch.dict(os.environ, CREDENTIALS, clear=True):
            assert cli.main(['trips.csv']) == cli.EXIT_INTERRUPTED
