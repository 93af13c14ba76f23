"""CSV / Excel data source parser."""

import io
import logging
from pathlib import Path
from typing import Optional, Union

import pandas as pd

from ..models import DataSource

logger = logging.getLogger(__name__)


class DataSourceParseError(Exception):
    """Exception raised for data source parsing errors."""
    pass


CSV_EXTENSIONS = [".csv"]
EXCEL_EXTENSIONS = [".xlsx", ".xls"]


def dataframe_to_data_source(df: pd.DataFrame, sheet_name: Optional[str] = None) -> DataSource:
    """
    Convert a DataFrame to a DataSource with all values as strings.

    Blank cells become "" and rows with no values at all are dropped.
    """
    df = df.fillna("").astype(str)
    if len(df.columns):
        df = df[~(df.apply(lambda col: col.str.strip()) == "").all(axis=1)]

    headers = [str(c) for c in df.columns]
    rows = [dict(zip(headers, values)) for values in df.itertuples(index=False, name=None)]
    return DataSource(headers=headers, rows=rows, sheet_name=sheet_name)


class DataSourceParser:
    """Parser for tabular data files (CSV, XLSX, XLS)."""

    def __init__(
        self,
        file_path: Optional[str] = None,
        data: Optional[bytes] = None,
        filename: Optional[str] = None,
    ):
        """
        Initialize the parser with a file path or raw bytes.

        Args:
            file_path: Path to the data file
            data: Raw file bytes (e.g. an upload)
            filename: Name used to detect the type of ``data``
        """
        if file_path is None and data is None:
            raise DataSourceParseError("Either file_path or data is required")

        if file_path is not None:
            self.file_path = Path(file_path)
            if not self.file_path.exists():
                raise DataSourceParseError(f"File not found: {file_path}")
            self.filename = filename or self.file_path.name
        else:
            self.file_path = None
            self.filename = filename or ""

        self.data = data
        self.extension = Path(self.filename).suffix.lower()
        if self.extension not in CSV_EXTENSIONS + EXCEL_EXTENSIONS:
            raise DataSourceParseError(
                f"Unsupported data file type: {self.extension or self.filename or 'unknown'}"
            )

    def _source(self):
        return self.file_path if self.file_path is not None else io.BytesIO(self.data)

    def parse(self, sheet_name: Optional[str] = None) -> DataSource:
        """
        Parse the file.

        Args:
            sheet_name: Excel sheet to read (first sheet when None)

        Returns:
            DataSource
        """
        if self.extension in CSV_EXTENSIONS:
            source = self.parse_csv()
        else:
            source = self.parse_excel(sheet_name)

        logger.info("Parsed %s: %d columns, %d rows", self.filename, len(source.headers), source.total_rows)
        return source

    def parse_csv(self) -> DataSource:
        try:
            df = pd.read_csv(
                self._source(),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                encoding="utf-8-sig",
            )
        except pd.errors.EmptyDataError:
            raise DataSourceParseError("CSV file is empty")
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise DataSourceParseError(f"CSV parsing failed: {e}")

        source = dataframe_to_data_source(df)
        if not source.headers or not source.rows:
            raise DataSourceParseError("CSV file is empty")
        return source

    def parse_excel(self, sheet_name: Optional[str] = None) -> DataSource:
        try:
            with pd.ExcelFile(self._source()) as workbook:
                sheet = sheet_name or workbook.sheet_names[0]
                df = workbook.parse(sheet_name=sheet, dtype=str)
        except (ValueError, OSError, KeyError, IndexError) as e:
            raise DataSourceParseError(f"Failed to parse Excel file: {e}")

        source = dataframe_to_data_source(df, sheet_name=sheet)
        if not source.headers or not source.rows:
            raise DataSourceParseError("Excel file is empty")
        return source


def load_data_source(
    source: Union[str, Path, bytes],
    filename: Optional[str] = None,
    sheet_name: Optional[str] = None,
) -> DataSource:
    """
    Parse a data file from a path or raw bytes.

    Args:
        source: File path, or raw bytes together with ``filename``
        filename: Original filename, needed when ``source`` is bytes
        sheet_name: Optional Excel sheet name

    Returns:
        DataSource

    Raises:
        DataSourceParseError: For missing, empty or unsupported files
    """
    if isinstance(source, (bytes, bytearray)):
        parser = DataSourceParser(data=bytes(source), filename=filename)
    else:
        parser = DataSourceParser(file_path=str(source), filename=filename)
    return parser.parse(sheet_name)
