"""Row traversal of worksheet parts.

Two strategies walk the ``sheetData`` rows of a worksheet: one over a
parsed element tree and one over a forward-only ``iterparse`` cursor. Both
yield identical rows. Worksheets omit empty rows entirely, so each strategy
yields an empty list for every row index skipped between two row elements.
"""

import logging
from typing import IO, Dict, Iterator, List, Optional, Tuple

from lxml import etree

from xlsx_parser import __name__ as xlsx_parser_name
from xlsx_parser.cell import Cell, xl_cell_to_rowcol
from xlsx_parser.file import iterparse_xml

logger = logging.getLogger(xlsx_parser_name)
debug = logger.debug

Hyperlinks = Optional[Dict[Tuple[int, int], str]]


def row_position(row_element: etree._Element, last_row_pos: int) -> int:
    """Return the 1-based row number of a row element; rows without ``r`` follow on."""
    row_ref = row_element.get("r")
    if row_ref is None:
        return last_row_pos + 1
    return int(row_ref)


def iter_row_cells(
    row_element: etree._Element, row_pos: int, model: object, hyperlinks: Hyperlinks = None
) -> Iterator[Cell]:
    col = 0
    for cell_element in row_element.iterfind("{*}c"):
        cell_ref = cell_element.get("r")
        if cell_ref is None:
            row, col = row_pos, col + 1
        else:
            row, col = xl_cell_to_rowcol(cell_ref)
        yield Cell._from_element(cell_element, row, col, model, hyperlinks)


def cells_for_row(
    row_element: etree._Element,
    row_pos: int,
    model: object,
    hyperlinks: Hyperlinks = None,
    cells: bool = False,
) -> List:
    """Return the contents of a row element as a list indexed by ``col - 1``.

    Columns with no cell element are ``None``. The list holds cell values,
    or :class:`Cell` objects if ``cells`` is ``True``.
    """
    row = []
    for cell in iter_row_cells(row_element, row_pos, model, hyperlinks):
        if len(row) < cell.col:
            row.extend([None] * (cell.col - len(row)))
        row[cell.col - 1] = cell if cells else cell.value
    return row


def _fill_rows(
    row_elements: Iterator[etree._Element],
    model: object,
    hyperlinks: Hyperlinks,
    cells: bool,
) -> Iterator[List]:
    last_row_pos = 0
    for row_element in row_elements:
        row_pos = row_position(row_element, last_row_pos)
        for _ in range(last_row_pos + 1, row_pos):
            yield []
        last_row_pos = row_pos
        yield cells_for_row(row_element, row_pos, model, hyperlinks, cells)


def iter_rows_loaded(
    root: etree._Element, model: object, hyperlinks: Hyperlinks = None, cells: bool = False
) -> Iterator[List]:
    """Yield the rows of a parsed worksheet tree; may be restarted at any time."""
    return _fill_rows(root.iterfind("{*}sheetData/{*}row"), model, hyperlinks, cells)


def iter_rows_streaming(
    fh: IO[bytes],
    part_name: str,
    model: object,
    hyperlinks: Hyperlinks = None,
    cells: bool = False,
) -> Iterator[List]:
    """Yield the rows of a worksheet stream in a single forward pass."""
    debug("iter_rows_streaming: part=%s", part_name)
    return _fill_rows(iterparse_xml(fh, part_name, "row"), model, hyperlinks, cells)


def iter_cells_loaded(
    root: etree._Element, model: object, hyperlinks: Hyperlinks = None
) -> Iterator[Cell]:
    """Yield every cell element of a parsed worksheet tree in document order."""
    last_row_pos = 0
    for row_element in root.iterfind("{*}sheetData/{*}row"):
        last_row_pos = row_position(row_element, last_row_pos)
        yield from iter_row_cells(row_element, last_row_pos, model, hyperlinks)
