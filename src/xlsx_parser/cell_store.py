import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from xlsx_parser import __name__ as xlsx_parser_name
from xlsx_parser.cell import Cell

logger = logging.getLogger(xlsx_parser_name)
debug = logger.debug


class ScanState(Enum):
    UNSCANNED = "unscanned"
    SCANNED = "scanned"


class CellStore:
    """Decoded cells of one sheet keyed by 1-based ``(row, col)``.

    The store is filled by a single scan of the sheet the first time any
    cell is read. ``scan`` is a callable returning the sheet's cells.
    """

    def __init__(self, sheet_name: str, scan: Callable[[], Iterable[Cell]]):
        self._sheet_name = sheet_name
        self._scan = scan
        self._cells: Dict[Tuple[int, int], Cell] = {}
        self.state = ScanState.UNSCANNED
        self.scan_count = 0

    def scan_if_needed(self) -> None:
        if self.state == ScanState.SCANNED:
            return
        debug("scan: sheet=%s", self._sheet_name)
        for cell in self._scan():
            self._cells[(cell.row, cell.col)] = cell
        self.scan_count += 1
        self.state = ScanState.SCANNED
        debug("scan: sheet=%s, num_cells=%d", self._sheet_name, len(self._cells))

    def read(self, row: int, col: int) -> Optional[Cell]:
        """Return the cell at ``(row, col)`` or ``None`` if the sheet has no such cell."""
        self.scan_if_needed()
        return self._cells.get((row, col))

    def cells(self) -> List[Cell]:
        self.scan_if_needed()
        return list(self._cells.values())

    def formulas(self) -> List[Tuple[int, int, str]]:
        """Return ``(row, col, formula)`` for every cell with a formula."""
        return [(cell.row, cell.col, cell.formula) for cell in self.cells() if cell.is_formula]

    def __len__(self) -> int:
        self.scan_if_needed()
        return len(self._cells)
