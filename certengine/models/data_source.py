"""Tabular data source model."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class DataSource:
    """Rows of named string values produced by a tabular file parser."""

    headers: List[str]
    rows: List[Dict[str, str]] = field(default_factory=list)
    sheet_name: Optional[str] = None

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.headers or not self.rows

    def column(self, header: str) -> List[str]:
        """All values of a column, in row order."""
        return [row.get(header, "") for row in self.rows]

    def first_row(self) -> Dict[str, str]:
        """First row, or an empty row when there is none (used for previews)."""
        return dict(self.rows[0]) if self.rows else {}
