from functools import partial
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from xlsx_parser.cell import Cell, EmptyCell, normalize_ref
from xlsx_parser.cell_store import CellStore
from xlsx_parser.constants import CellType
from xlsx_parser.containers import ItemsList
from xlsx_parser.model import Label, _XlsxModel
from xlsx_parser.styles import Font

__all__ = ["Document", "Label", "Sheet"]

SheetRef = Union[int, str, None]
ColRef = Union[int, str, None]


def _strip_trailing_empties(row: List) -> List:
    while row and (row[-1] is None or isinstance(row[-1], EmptyCell)):
        row.pop()
    return row


def _limit_rows(rows: Iterator[List], max_rows: Optional[int], strip_nils: bool) -> Iterator[List]:
    if max_rows is not None and max_rows < 1:
        return
    try:
        for row_num, row in enumerate(rows, start=1):
            yield _strip_trailing_empties(row) if strip_nils else row
            if max_rows is not None and row_num >= max_rows:
                break
    finally:
        if hasattr(rows, "close"):
            rows.close()


class Sheet:
    def __init__(self, model, sheet_index):
        self._model = model
        self._sheet_index = sheet_index
        self._cell_store = CellStore(self.name, partial(model.sheet_cells, sheet_index))

    @property
    def name(self) -> str:
        """str: The name of the sheet."""
        return self._model.sheet_names()[self._sheet_index]

    @property
    def index(self) -> int:
        """int: The 1-based position of the sheet in the workbook."""
        return self._sheet_index + 1

    def cell(self, row: Union[int, str], col: ColRef = None) -> Cell:
        """
        Return a single cell of the sheet.

        Cells can be referenced by 1-based row and column numbers, a row
        number and a column name, or an A1 style reference:

        .. code:: python

            value = sheet.cell(3, 2).value
            value = sheet.cell(3, "B").value
            value = sheet.cell("B3").value

        Parameters
        ----------
        row: int | str
            Row number, or an A1 reference if ``col`` is not given.
        col: int | str, optional
            Column number or column name.

        Returns
        -------
        Cell:
            The cell, or an :class:`EmptyCell` if the sheet has no cell at
            that position.

        Raises
        ------
        IndexError:
            If the reference is invalid.
        UnsupportedError:
            If the document was opened with ``minimal_load``.
        """
        row, col = normalize_ref(row, col)
        cell = self._cell_store.read(row, col)
        if cell is None:
            return EmptyCell(row, col)
        return cell

    def value(self, row: Union[int, str], col: ColRef = None):
        """The decoded value of a cell, or ``None`` for empty cells."""
        return self.cell(row, col).value

    def celltype(self, row: Union[int, str], col: ColRef = None) -> CellType:
        """CellType: The type of a cell; ``FORMULA`` for any cell with a formula."""
        cell = self.cell(row, col)
        return CellType.FORMULA if cell.is_formula else cell.type

    def formula(self, row: Union[int, str], col: ColRef = None) -> Optional[str]:
        return self.cell(row, col).formula

    def formulas(self) -> List[Tuple[int, int, str]]:
        """List[Tuple[int, int, str]]: ``(row, col, formula)`` for every formula in the sheet."""
        return sorted(self._cell_store.formulas())

    def font(self, row: Union[int, str], col: ColRef = None) -> Font:
        return self.cell(row, col).font

    def format(self, row: Union[int, str], col: ColRef = None) -> str:
        """str: The number format code of a cell."""
        return self.cell(row, col).format

    def raw_type(self, row: Union[int, str], col: ColRef = None) -> Optional[str]:
        """str: How a cell's raw value is stored: ``"string"`` or ``"numeric_or_formula"``."""
        return self.cell(row, col).raw_type

    def raw_value(self, row: Union[int, str], col: ColRef = None) -> Optional[str]:
        """str: The undecoded text of a cell's value."""
        return self.cell(row, col).raw_value

    def comment(self, row: Union[int, str], col: ColRef = None) -> Optional[str]:
        row, col = normalize_ref(row, col)
        return self._model.sheet_comments(self._sheet_index).get((row, col))

    def comments(self) -> List[Tuple[int, int, str]]:
        """List[Tuple[int, int, str]]: ``(row, col, text)`` for every comment in the sheet."""
        comments = self._model.sheet_comments(self._sheet_index)
        return sorted((row, col, text) for (row, col), text in comments.items())

    def dimensions(self) -> Optional[str]:
        """str: The used range the sheet declares, e.g. ``"A1:C5"``; read without a scan."""
        return self._model.dimension(self._sheet_index)

    def each_row(
        self, max_rows: Optional[int] = None, strip_nils: bool = False, cells: bool = False
    ) -> Iterator[List]:
        """
        Iterate over the rows of the sheet.

        Rows missing from the sheet are returned as empty lists so that the
        Nth row returned is always row N of the sheet. Each row is a list
        indexed by column, with ``None`` for missing columns.

        Parameters
        ----------
        max_rows: int, optional
            Stop after this many rows, including empty ones.
        strip_nils: bool, optional, default: False
            Remove trailing empty cells from each row.
        cells: bool, optional, default: False
            Return :class:`Cell` objects rather than cell values.

        Yields
        ------
        List:
            The values or cells of each row.
        """
        if self._model.minimal_load:
            rows = self._model.iter_rows_streaming(self._sheet_index, cells)
        else:
            rows = self._model.iter_rows_loaded(self._sheet_index, cells)
        return _limit_rows(rows, max_rows, strip_nils)

    def each_row_streaming(
        self, max_rows: Optional[int] = None, strip_nils: bool = False, cells: bool = False
    ) -> Iterator[List]:
        """
        Iterate over the rows of the sheet in a single pass over the sheet part.

        Only available for documents opened with ``minimal_load``.

        Raises
        ------
        UnsupportedError:
            If the document was not opened with ``minimal_load``.
        """
        rows = self._model.iter_rows_streaming(self._sheet_index, cells)
        return _limit_rows(rows, max_rows, strip_nils)


class Document:
    """
    Open a spreadsheet document for reading.

    Parameters
    ----------
    filename: str | Path
        An ``.xlsx`` file, or a directory holding an extracted package.
    packed: bool, optional
        ``True`` to read a zip archive, ``False`` to read a directory of
        extracted parts. By default, directories are read as extracted
        packages and anything else as an archive.
    cell_max: int, optional
        Refuse to open documents where any sheet declares more cells than
        this.
    minimal_load: bool, optional, default: False
        Do not load sheets at open. Rows can then only be read in a single
        pass with :py:meth:`each_row` and individual cells cannot be
        queried.

    Raises
    ------
    FileError:
        If the file does not exist.
    FileFormatError:
        If the file is not a valid spreadsheet document.
    ExceedsMaxError:
        If a sheet has more than ``cell_max`` cells.
    """

    def __init__(
        self,
        filename: Union[str, Path],
        packed: Optional[bool] = None,
        cell_max: Optional[int] = None,
        minimal_load: bool = False,
    ):
        self._model = _XlsxModel(
            filename, packed=packed, cell_max=cell_max, minimal_load=minimal_load
        )
        refs = range(len(self._model.sheet_names()))
        self._sheets = ItemsList(self._model, refs, Sheet)
        self._default_sheet = self._sheets[0] if len(self._sheets) > 0 else None

    def __enter__(self):
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying archive."""
        self._model.close()

    @property
    def sheets(self) -> List[Sheet]:
        """List[:class:`Sheet`]: A list of sheets in the document."""
        return self._sheets

    @property
    def sheet_names(self) -> List[str]:
        """List[str]: The names of the sheets in workbook order."""
        return [sheet.name for sheet in self._sheets]

    @property
    def default_sheet(self) -> Sheet:
        """
        :class:`Sheet`: The sheet used when methods are called without ``sheet``.

        Initially the first sheet. Can be set by name or 1-based index.
        """
        return self._default_sheet

    @default_sheet.setter
    def default_sheet(self, sheet: Union[int, str, Sheet]) -> None:
        self._default_sheet = self.sheet(sheet)

    @property
    def base_date(self):
        """Date: The date of serial day zero used to decode dates."""
        return self._model.base_date

    def sheet(self, sheet: Union[int, str, Sheet, None] = None) -> Sheet:
        """
        Return a sheet by name or 1-based index, or the default sheet.

        Raises
        ------
        SheetError:
            If there is no such sheet.
        """
        if sheet is None:
            return self.default_sheet
        if isinstance(sheet, Sheet):
            return sheet
        return self._sheets.lookup(sheet)

    def cell(self, row: Union[int, str], col: ColRef = None, sheet: SheetRef = None):
        """The decoded value of a cell, or ``None`` for empty cells."""
        return self.sheet(sheet).value(row, col)

    def celltype(self, row: Union[int, str], col: ColRef = None, sheet: SheetRef = None) -> CellType:
        return self.sheet(sheet).celltype(row, col)

    def formula(
        self, row: Union[int, str], col: ColRef = None, sheet: SheetRef = None
    ) -> Optional[str]:
        return self.sheet(sheet).formula(row, col)

    def formulas(self, sheet: SheetRef = None) -> List[Tuple[int, int, str]]:
        return self.sheet(sheet).formulas()

    def font(self, row: Union[int, str], col: ColRef = None, sheet: SheetRef = None) -> Font:
        return self.sheet(sheet).font(row, col)

    def format(self, row: Union[int, str], col: ColRef = None, sheet: SheetRef = None) -> str:
        return self.sheet(sheet).format(row, col)

    def raw_type(
        self, row: Union[int, str], col: ColRef = None, sheet: SheetRef = None
    ) -> Optional[str]:
        return self.sheet(sheet).raw_type(row, col)

    def raw_value(
        self, row: Union[int, str], col: ColRef = None, sheet: SheetRef = None
    ) -> Optional[str]:
        return self.sheet(sheet).raw_value(row, col)

    def comment(
        self, row: Union[int, str], col: ColRef = None, sheet: SheetRef = None
    ) -> Optional[str]:
        return self.sheet(sheet).comment(row, col)

    def comments(self, sheet: SheetRef = None) -> List[Tuple[int, int, str]]:
        return self.sheet(sheet).comments()

    @property
    def labels(self) -> Dict[str, Label]:
        """Dict[str, :class:`Label`]: Single-cell defined names mapped to their cell."""
        return dict(self._model.labels())

    def label(self, name: str) -> Optional[Label]:
        """
        Return the cell a defined name refers to.

        Parameters
        ----------
        name: str
            The defined name.

        Returns
        -------
        Label:
            ``(sheet, row, col)`` for the name, or ``None`` if the workbook
            has no single-cell name ``name``.
        """
        return self._model.labels().get(name)

    def dimensions(self, sheet: SheetRef = None) -> Optional[str]:
        return self.sheet(sheet).dimensions()

    def each_row(
        self,
        sheet: SheetRef = None,
        max_rows: Optional[int] = None,
        strip_nils: bool = False,
        cells: bool = False,
    ) -> Iterator[List]:
        """Iterate over the rows of a sheet; see :py:meth:`Sheet.each_row`."""
        return self.sheet(sheet).each_row(max_rows=max_rows, strip_nils=strip_nils, cells=cells)

    def each_row_streaming(
        self,
        sheet: SheetRef = None,
        max_rows: Optional[int] = None,
        strip_nils: bool = False,
        cells: bool = False,
    ) -> Iterator[List]:
        """Iterate over the rows of a sheet; see :py:meth:`Sheet.each_row_streaming`."""
        return self.sheet(sheet).each_row_streaming(
            max_rows=max_rows, strip_nils=strip_nils, cells=cells
        )
