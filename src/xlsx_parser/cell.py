import logging
import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Tuple, Union
from warnings import warn

import pendulum
from lxml import etree
from pendulum import Date, DateTime, Duration, duration

from xlsx_parser import __name__ as xlsx_parser_name
from xlsx_parser.constants import (
    BOOLEAN_FALSE_VALUE,
    BOOLEAN_TRUE_VALUE,
    DATE_FRACTION_PRECISION,
    SECONDS_IN_DAY,
    SECONDS_IN_HOUR,
    SECONDS_IN_MINUTE,
    CellType,
)
from xlsx_parser.exceptions import UnsupportedWarning
from xlsx_parser.shared_strings import rich_text
from xlsx_parser.styles import Font

logger = logging.getLogger(xlsx_parser_name)
debug = logger.debug

__all__ = [
    "BoolCell",
    "Cell",
    "DateCell",
    "DateTimeCell",
    "EmptyCell",
    "LinkCell",
    "NumberCell",
    "PercentageCell",
    "TextCell",
    "TimeCell",
    "xl_cell_to_rowcol",
    "xl_col_to_name",
    "xl_range",
    "xl_rowcol_to_cell",
]

_NUMERIC_CELL_TYPES = (None, "n", "e")
_KNOWN_CELL_TYPES = ("s", "b", "str", "inlineStr", "d", *_NUMERIC_CELL_TYPES)

RAW_TYPE_STRING = "string"
RAW_TYPE_NUMERIC = "numeric_or_formula"


class Cell:
    """.. NOTE::
    Do not instantiate directly. Cells are created by :py:class:`~xlsx_parser.Document`.
    """

    def __init__(self, row: int, col: int, value) -> None:
        self._value = value
        self.row = row
        self.col = col
        self.formula = None
        self.raw_type = None
        self.raw_value = None
        self.style_id = 0
        self._styles = None

    def __str__(self) -> str:
        cell_str = f"[{self.row},{self.col}]:type={self._type.name}, value={self._value!r}"
        if self.formula is not None:
            cell_str += f", formula={self.formula!r}"
        cell_str += f", raw_type={self.raw_type}, raw_value={self.raw_value!r}, s={self.style_id}"
        return cell_str

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self}>"

    @property
    def value(self):
        return self._value

    @property
    def type(self) -> CellType:
        """CellType: The type of the stored value, ignoring any formula."""
        return self._type

    @property
    def is_formula(self) -> bool:
        """bool: ``True`` if the cell contains a formula."""
        return self.formula is not None

    @property
    def font(self) -> Font:
        """Font: The :class:`Font` for the cell's style."""
        if self._styles is None:
            return Font()
        return self._styles.font(self.style_id)

    @property
    def format(self) -> str:
        """str: The number format code for the cell's style."""
        if self._styles is None:
            return "General"
        return self._styles.format_code(self.style_id)

    @classmethod
    def _from_element(  # noqa: PLR0912
        cls,
        element: etree._Element,
        row: int,
        col: int,
        model: object,
        hyperlinks: Optional[Dict[Tuple[int, int], str]] = None,
    ):
        """Decode a worksheet ``c`` element into a typed cell.

        ``row`` and ``col`` are the resolved 1-based coordinates of the
        element. ``model`` provides the shared strings, styles and date
        epoch of the workbook.
        """
        cell_type = element.get("t")
        try:
            style_id = int(element.get("s", 0))
        except ValueError:
            style_id = 0

        formula = None
        value_text = None
        inline_string = None
        for child in element:
            if not isinstance(child.tag, str):
                continue
            tag = etree.QName(child).localname
            if tag == "f":
                formula = child.text or ""
            elif tag == "v":
                value_text = child.text or ""
            elif tag == "is":
                inline_string = rich_text(child)

        if cell_type not in _KNOWN_CELL_TYPES:
            warn(
                f"[{row},{col}]: unsupported cell type '{cell_type}'",
                UnsupportedWarning,
                stacklevel=2,
            )

        raw_type = RAW_TYPE_STRING
        if inline_string is not None:
            cell = TextCell(row, col, inline_string)
            value_text = inline_string
        elif value_text is None:
            cell = EmptyCell(row, col)
            raw_type = None
        elif cell_type == "s":
            cell = TextCell(row, col, model.shared_strings.get(int(value_text)))
        elif cell_type == "b":
            cell = BoolCell(row, col, _is_true(value_text))
            raw_type = RAW_TYPE_NUMERIC
        elif cell_type == "str":
            cell = TextCell(row, col, value_text)
        elif cell_type == "d":
            cell = _iso_date_cell(row, col, value_text)
        else:
            cell = _numeric_cell(row, col, value_text, model, style_id)
            raw_type = RAW_TYPE_STRING if isinstance(cell, TextCell) else RAW_TYPE_NUMERIC

        if hyperlinks and (row, col) in hyperlinks and isinstance(cell, (TextCell, NumberCell)):
            cell = LinkCell(row, col, str(cell.value), hyperlinks[(row, col)])

        cell.formula = formula
        cell.raw_type = raw_type
        cell.raw_value = value_text
        cell.style_id = style_id
        cell._styles = model.styles

        if logging.getLogger(__package__).level == logging.DEBUG:
            # Guard to reduce expense of computing fields
            debug(str(cell))

        return cell


class EmptyCell(Cell):
    """.. NOTE::
    Do not instantiate directly. Cells are created by :py:class:`~xlsx_parser.Document`.
    """

    def __init__(self, row: int, col: int) -> None:
        super().__init__(row, col, None)
        self._type = CellType.EMPTY

    @property
    def value(self):
        return None


class NumberCell(Cell):
    """.. NOTE::
    Do not instantiate directly. Cells are created by :py:class:`~xlsx_parser.Document`.
    """

    def __init__(self, row: int, col: int, value: Union[int, float]) -> None:
        super().__init__(row, col, value)
        self._type = CellType.FLOAT

    @property
    def value(self) -> Union[int, float]:
        return self._value


class TextCell(Cell):
    def __init__(self, row: int, col: int, value: str) -> None:
        super().__init__(row, col, value)
        self._type = CellType.STRING

    @property
    def value(self) -> str:
        return self._value


class BoolCell(Cell):
    """A boolean cell.

    The value is the string ``"TRUE"`` or ``"FALSE"`` rather than a Python
    ``bool`` so that values read from spreadsheets compare equal to the text
    users see in the application. Use :py:attr:`is_true` for a ``bool``.
    """

    def __init__(self, row: int, col: int, value: bool) -> None:
        super().__init__(row, col, BOOLEAN_TRUE_VALUE if value else BOOLEAN_FALSE_VALUE)
        self._type = CellType.BOOLEAN

    @property
    def value(self) -> str:
        return self._value

    @property
    def is_true(self) -> bool:
        return self._value == BOOLEAN_TRUE_VALUE


class DateCell(Cell):
    """.. NOTE::
    Do not instantiate directly. Cells are created by :py:class:`~xlsx_parser.Document`.
    """

    def __init__(self, row: int, col: int, value: Date) -> None:
        super().__init__(row, col, value)
        self._type = CellType.DATE

    @property
    def value(self) -> Date:
        return self._value


class TimeCell(Cell):
    """A time of day with no date; the value is the number of seconds since midnight."""

    def __init__(self, row: int, col: int, value: int) -> None:
        super().__init__(row, col, value)
        self._type = CellType.TIME

    @property
    def value(self) -> int:
        return self._value

    @property
    def hms(self) -> Tuple[int, int, int]:
        """Tuple[int, int, int]: The time as ``(hours, minutes, seconds)``."""
        return _seconds_to_hms(self._value)

    @property
    def duration(self) -> Duration:
        """Duration: The time since midnight."""
        return duration(seconds=self._value)


class DateTimeCell(Cell):
    def __init__(self, row: int, col: int, value: DateTime) -> None:
        super().__init__(row, col, value)
        self._type = CellType.DATETIME

    @property
    def value(self) -> DateTime:
        return self._value


class PercentageCell(Cell):
    """A number formatted as a percentage; the value is the unscaled fraction."""

    def __init__(self, row: int, col: int, value: float) -> None:
        super().__init__(row, col, value)
        self._type = CellType.PERCENTAGE

    @property
    def value(self) -> float:
        return self._value


class LinkCell(Cell):
    """A cell whose text is an external hyperlink."""

    def __init__(self, row: int, col: int, value: str, url: str) -> None:
        super().__init__(row, col, value)
        self._type = CellType.LINK
        self.url = url

    @property
    def value(self) -> str:
        return self._value


def _is_true(value_text: str) -> bool:
    try:
        return int(float(value_text)) == 1
    except ValueError:
        return False


def _parse_number(value_text: str) -> Union[int, float]:
    """Parse cell content as a number, collapsing integral values to ``int``.

    Raises ``ValueError`` if the content is not numeric.
    """
    value = float(value_text)
    if value.is_integer():
        return int(value)
    return value


def _numeric_cell(row: int, col: int, value_text: str, model: object, style_id: int) -> Cell:
    candidate_type = model.styles.format_type(style_id)
    try:
        serial = float(value_text)
    except ValueError:
        return TextCell(row, col, value_text)

    if candidate_type in (CellType.DATE, CellType.TIME, CellType.DATETIME):
        if serial < 1.0 and candidate_type != CellType.DATE:
            return TimeCell(row, col, _serial_to_seconds(serial))
        elif serial >= 1.0 and _has_time_fraction(serial):
            return DateTimeCell(row, col, _serial_to_datetime(serial, model.base_date))
        else:
            return DateCell(row, col, _serial_to_date(serial, model.base_date))
    elif candidate_type == CellType.PERCENTAGE:
        return PercentageCell(row, col, serial)
    else:
        return NumberCell(row, col, _parse_number(value_text))


def _iso_date_cell(row: int, col: int, value_text: str) -> Cell:
    try:
        value = pendulum.parse(value_text)
    except ValueError:
        return TextCell(row, col, value_text)
    if isinstance(value, DateTime):
        if (value.hour, value.minute, value.second, value.microsecond) == (0, 0, 0, 0):
            return DateCell(row, col, value.date())
        return DateTimeCell(row, col, value)
    elif isinstance(value, Date):
        return DateCell(row, col, value)
    return TextCell(row, col, value_text)


def _round_half_away(value: float) -> int:
    """Round to the nearest integer with ties rounded away from zero."""
    return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _seconds_to_hms(seconds: int) -> Tuple[int, int, int]:
    hours, seconds = divmod(seconds, SECONDS_IN_HOUR)
    minutes, seconds = divmod(seconds, SECONDS_IN_MINUTE)
    return hours, minutes, seconds


def _has_time_fraction(serial: float) -> bool:
    return round(serial - math.floor(serial), DATE_FRACTION_PRECISION) != 0


def _serial_to_date(serial: float, epoch: Date) -> Date:
    return epoch.add(days=math.floor(serial))


def _serial_to_seconds(serial: float) -> int:
    hours, minutes, seconds = _seconds_to_hms(_round_half_away(serial * SECONDS_IN_DAY))
    return hours * SECONDS_IN_HOUR + minutes * SECONDS_IN_MINUTE + seconds


def _serial_to_datetime(serial: float, epoch: Date) -> DateTime:
    """Convert a serial day count to a timestamp rounded to the nearest second.

    The timestamp is parsed from a literal built from integer day and second
    counts so that no fractional day is ever added to a timestamp.
    """
    serial = round(serial, DATE_FRACTION_PRECISION)
    days = math.floor(serial)
    seconds = _round_half_away((serial - days) * SECONDS_IN_DAY)
    if seconds >= SECONDS_IN_DAY:
        days += 1
        seconds -= SECONDS_IN_DAY
    day = epoch.add(days=days)
    hours, minutes, seconds = _seconds_to_hms(seconds)
    return pendulum.parse(f"{day.isoformat()} {hours:02d}:{minutes:02d}:{seconds:02d}")


# Cell reference conversion from  https://github.com/jmcnamara/XlsxWriter
# Copyright (c) 2013-2021, John McNamara <jmcnamara@cpan.org>
range_parts = re.compile(r"(\$?)([A-Z]{1,3})(\$?)(\d+)$")


def xl_col_to_number(col_str: str) -> int:
    """Convert a column name such as ``"AB"`` to a 1-based column number."""
    if not re.fullmatch(r"\$?[A-Za-z]{1,3}", col_str):
        msg = f"invalid column reference {col_str}"
        raise IndexError(msg)

    # Convert base26 column string to number.
    expn = 0
    col = 0
    for char in reversed(col_str.lstrip("$").upper()):
        col += (ord(char) - ord("A") + 1) * (26**expn)
        expn += 1
    return col


def xl_cell_to_rowcol(cell_str: str) -> Tuple[int, int]:
    """Convert a cell reference in A1 notation to a 1-based row and column.

    Parameters
    ----------
    cell_str:  str
        A1 notation cell reference

    Returns
    -------
    row, col: int, int
        Cell row and column numbers (1-based).

    Raises
    ------
    IndexError:
        If the reference is not in A1 notation.
    """
    match = range_parts.match(cell_str.upper()) if cell_str else None
    if not match:
        msg = f"invalid cell reference {cell_str}"
        raise IndexError(msg)

    return int(match.group(4)), xl_col_to_number(match.group(2))


def xl_range(first_row, first_col, last_row, last_col):
    """Convert 1-based row and col cell references to a A1:B1 range string.

    Parameters
    ----------
    first_row: int
        The first cell row.
    first_col: int
        The first cell column.
    last_row: int
        The last cell row.
    last_col: int
        The last cell column.

    Returns
    -------
    str:
        A1:B1 style range string.
    """
    range1 = xl_rowcol_to_cell(first_row, first_col)
    range2 = xl_rowcol_to_cell(last_row, last_col)

    if range1 == range2:
        return range1
    else:
        return range1 + ":" + range2


def xl_rowcol_to_cell(row, col, row_abs=False, col_abs=False):
    """Convert a 1-based row and column cell reference to a A1 style string.

    Parameters
    ----------
    row: int
         The cell row.
    col: int
        The cell column.
    row_abs: bool
        If ``True``, make the row absolute.
    col_abs: bool
        If ``True``, make the column absolute.

    Returns
    -------
    str:
        A1 style string.
    """
    if row < 1:
        msg = f"row reference {row} below one"
        raise IndexError(msg)

    row_abs = "$" if row_abs else ""
    col_str = xl_col_to_name(col, col_abs)

    return col_str + row_abs + str(row)


def xl_col_to_name(col, col_abs=False):
    """Convert a 1-based column number to a column name.

    Parameters
    ----------
    col: int
        The column number (1-based).
    col_abs: bool, default: False
        If ``True``, make the column absolute.

    Returns
    -------
        str:
            Column in A1 notation.
    """
    if col < 1:
        msg = f"column reference {col} below one"
        raise IndexError(msg)

    col_str = ""
    col_abs = "$" if col_abs else ""

    while col:
        # Set remainder from 1 .. 26
        remainder = col % 26

        if remainder == 0:
            remainder = 26

        # Convert the remainder to a character.
        col_letter = chr(ord("A") + remainder - 1)

        # Accumulate the column letters, right to left.
        col_str = col_letter + col_str

        # Get the next order of magnitude.
        col = int((col - 1) / 26)

    return col_abs + col_str


def cells_in_range(range_str: str) -> int:
    """Return the number of cells in an ``A1:C5`` style range, or ``0`` if empty."""
    if not range_str:
        return 0
    parts = range_str.split(":")
    first_row, first_col = xl_cell_to_rowcol(parts[0])
    last_row, last_col = xl_cell_to_rowcol(parts[-1])
    return (abs(last_row - first_row) + 1) * (abs(last_col - first_col) + 1)


def normalize_ref(row: Union[int, str], col: Union[int, str, None] = None) -> Tuple[int, int]:
    """Resolve ``("B3")``, ``(3, 2)``, ``(3, "B")`` or ``("B", 3)`` to 1-based ``(row, col)``.

    Raises
    ------
    IndexError:
        If the reference is invalid or not 1-based.
    """
    if col is None:
        if not isinstance(row, str):
            msg = "column is required for numeric row references"
            raise IndexError(msg)
        return xl_cell_to_rowcol(row)
    if isinstance(row, str) and isinstance(col, int):
        row, col = col, row
    if isinstance(col, str):
        col = xl_col_to_number(col)
    if not isinstance(row, int) or row < 1:
        msg = f"row reference {row} below one"
        raise IndexError(msg)
    if col < 1:
        msg = f"column reference {col} below one"
        raise IndexError(msg)
    return row, col
