"""Robot trajectory log in CSV format."""

import csv
import logging
from pathlib import Path
from typing import Any, IO, Optional, TYPE_CHECKING

from ..model.state import CSV_FIELDS

if TYPE_CHECKING:
    from ..model.state import SimulationState

logger = logging.getLogger(__name__)


class CSVWriter:
    """
    Appends one row per robot per tick, flushing after every tick so a
    long or interrupted run still leaves a readable log.

    Output format:
        step,agent_id,x,y,heading,turn_direction,c_left,c_right
        1,1,5.1,10.0,1.57,1,0.42,0.40
        ...

    Float columns are rounded to `precision` digits; None keeps full repr.
    """

    def __init__(self, output_path: Path, precision: Optional[int] = 6):
        self.output_path = Path(output_path)
        self.precision = precision
        self.rows_written = 0
        self._file: Optional[IO[str]] = None
        self._writer = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def open(self) -> None:
        """Create the file and write the header. Reopening truncates."""
        self.close()
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.output_path, 'w', newline='')
        self._writer = csv.writer(self._file)
        self._writer.writerow(CSV_FIELDS)
        self.rows_written = 0

    def _cell(self, value: Any) -> Any:
        if self.precision is not None and isinstance(value, float):
            return round(float(value), self.precision)
        return value

    def append(self, state: "SimulationState") -> int:
        """Write this tick's robot rows and return how many were written."""
        if not self.is_open:
            self.open()
        rows = [[self._cell(row[name]) for name in CSV_FIELDS]
                for row in state.to_csv_rows()]
        self._writer.writerows(rows)
        self._file.flush()
        self.rows_written += len(rows)
        return len(rows)

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            logger.debug("Closed %s after %d rows", self.output_path, self.rows_written)
        self._file = None
        self._writer = None

    def __enter__(self) -> "CSVWriter":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
