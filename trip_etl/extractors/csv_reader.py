# trip_etl/extractors/csv_reader.py
"""
CSV row source for the taxi trip ETL pipeline
"""

import csv
import io
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import pandas as pd

from trip_etl.models.row_result import RawRow
from trip_etl.models.taxi_trip import TRIP_COLUMNS
from trip_etl.utils.logger import get_logger
from trip_etl.utils.exceptions import DataSourceError


_MALFORMED = "\x00malformed"


def _unquote(value: str) -> str:
    """Strip one pair of enclosing quotes and undo doubled inner quotes"""
    if '"' not in value:
        return value
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        inner = value[1:-1]
        if '"' not in inner.replace('""', ""):
            return inner.replace('""', '"')
    raise ValueError(f"unbalanced quote in {value!r}")


class TripCsvReader:
    """
    Reads a delimited trip file and yields one RawRow per data line

    The reader:
    - Validates that the header names every required trip column
    - Hands every value back as a string; typing happens downstream
    - Marks lines with more fields than the header, or with an unbalanced
      quote, as malformed rows instead of failing the file
    - Numbers rows by physical line, header being line 1
    - Owns the file handle and releases it on every exit path

    Usage:
        with TripCsvReader(path) as reader:
            for raw in reader.rows():
                ...
    """

    def __init__(self, file_path: Path, delimiter: str = ","):
        """
        Initialize CSV reader

        Args:
            file_path: Path to the input file
            delimiter: Field separator
        """
        self.file_path = Path(file_path)
        self.delimiter = delimiter
        self.logger = get_logger(__name__)
        self.columns: List[str] = []
        self._handle = None

    def __enter__(self):
        """Open the file and validate its header"""
        if not self.file_path.is_file():
            raise DataSourceError(
                f"Input file not found: {self.file_path}",
                error_code="FILE_NOT_FOUND"
            )

        try:
            self._handle = open(
                self.file_path, "r", encoding="utf-8-sig", errors="replace", newline=""
            )
        except OSError as e:
            raise DataSourceError(
                f"Cannot open input file: {self.file_path}",
                error_code="FILE_UNREADABLE",
                cause=e
            ) from e

        try:
            self.columns = self._read_header()
        except Exception:
            self.close()
            raise

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Release the file handle"""
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    def _read_header(self) -> List[str]:
        """
        Read and validate the header line

        Only the first physical line is parsed, so damage further down
        the file never fails the header check.

        Returns:
            Column names in file order

        Raises:
            DataSourceError: If the file is empty or lacks a required column
        """
        first_line = self._handle.readline()
        self._handle.seek(0)
        if not first_line.strip():
            raise DataSourceError(
                f"Input file has no header: {self.file_path}",
                error_code="EMPTY_FILE"
            )

        try:
            header = pd.read_csv(
                io.StringIO(first_line), sep=self.delimiter, nrows=0, dtype=str, index_col=False
            )
        except pd.errors.ParserError as e:
            raise DataSourceError(
                f"Cannot decode header of {self.file_path}",
                error_code="BAD_HEADER",
                cause=e
            ) from e

        columns = [str(column) for column in header.columns]
        missing = [column for column in TRIP_COLUMNS if column not in columns]
        if missing:
            raise DataSourceError(
                f"Input header is missing required columns: {', '.join(missing)}",
                error_code="MISSING_COLUMNS",
                context={'file': str(self.file_path), 'columns': ", ".join(columns)}
            )

        self.logger.debug(f"Header of {self.file_path.name}: {columns}")
        return columns

    def _flag_bad_line(self, fields: List[str]) -> Optional[List[str]]:
        # Keep the line in position so the row count stays exact
        self.logger.debug(f"Line with {len(fields)} fields, expected {len(self.columns)}")
        return [_MALFORMED] * len(self.columns)

    def _data_lines(self) -> List[Tuple[int, str]]:
        """Non-blank data lines with their physical line numbers (header = 1)"""
        lines = self._handle.read().splitlines()
        return [
            (number, line)
            for number, line in enumerate(lines[1:], start=2)
            if line.strip()
        ]

    def rows(self) -> Iterator[RawRow]:
        """
        Yield the data rows in file order

        Every non-blank physical line becomes exactly one RawRow, so a
        stray quote or a bad byte can only damage its own row. Quoted
        values may not span lines or contain the delimiter.

        Yields:
            RawRow per data line, with ``malformed`` set for lines that
            could not be split into the header's columns

        Raises:
            DataSourceError: If the reader is not open
        """
        if self._handle is None:
            raise DataSourceError("Reader is not open", error_code="READER_CLOSED")

        numbered = self._data_lines()
        if not numbered:
            self.logger.info(f"No data rows in {self.file_path.name}")
            return

        try:
            frame = pd.read_csv(
                io.StringIO("\n".join(line for _, line in numbered)),
                sep=self.delimiter,
                header=None,
                names=self.columns,
                dtype=str,
                keep_default_na=False,
                na_filter=False,
                index_col=False,
                skip_blank_lines=False,
                quoting=csv.QUOTE_NONE,
                engine="python",
                on_bad_lines=self._flag_bad_line,
            )
        except pd.errors.ParserError as e:
            raise DataSourceError(
                f"Failed to split {self.file_path}: {str(e)}",
                error_code="DECODE_FAILED",
                cause=e
            ) from e

        if len(frame) != len(numbered):
            raise DataSourceError(
                f"Read {len(frame)} records from {len(numbered)} data lines of {self.file_path}",
                error_code="ROW_COUNT_MISMATCH"
            )

        self.logger.info(f"Read {len(frame)} data rows from {self.file_path.name}")

        for (row_number, _), record in zip(numbered, frame.to_dict(orient="records")):
            fields = {
                str(column): value if isinstance(value, str) else ""
                for column, value in record.items()
            }
            if all(value == _MALFORMED for value in fields.values()):
                yield RawRow(row_number=row_number, fields={}, malformed=True)
                continue
            try:
                fields = {column: _unquote(value) for column, value in fields.items()}
            except ValueError as e:
                self.logger.debug(f"Line {row_number}: {e}")
                yield RawRow(row_number=row_number, fields={}, malformed=True)
                continue
            yield RawRow(row_number=row_number, fields=fields)
