from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from lxml import etree

from xlsx_parser.constants import (
    BUILTIN_FORMATS,
    DEFAULT_FORMAT,
    EXCEPTIONAL_FORMATS,
    CellType,
)

__all__ = ["Font", "StyleTable", "format_to_type"]

_FALSE_VALUES = ("0", "false", "none")


def format_to_type(format_code: str) -> CellType:
    """Classify a number format code as the type of value it displays.

    This is a heuristic over the characters of the code rather than a
    format string parser. Rules are tested in order:

    1. exceptional literal codes, which the rules below get wrong
    2. ``#`` is a number
    3. ``d`` or ``y`` is a date, or a datetime if ``h`` or ``s`` also appear
    4. ``h`` or ``s`` is a time
    5. ``%`` is a percentage
    6. anything else is a number

    Parameters
    ----------
    format_code: str
        Number format code such as ``"yyyy-mm-dd"``; case is ignored.

    Returns
    -------
    CellType
        One of ``FLOAT``, ``DATE``, ``TIME``, ``DATETIME`` or ``PERCENTAGE``.
    """
    format_code = str(format_code or "").lower()
    if format_code in EXCEPTIONAL_FORMATS:
        return CellType[EXCEPTIONAL_FORMATS[format_code].upper()]
    elif "#" in format_code:
        return CellType.FLOAT
    elif "d" in format_code or "y" in format_code:
        if "h" in format_code or "s" in format_code:
            return CellType.DATETIME
        else:
            return CellType.DATE
    elif "h" in format_code or "s" in format_code:
        return CellType.TIME
    elif "%" in format_code:
        return CellType.PERCENTAGE
    else:
        return CellType.FLOAT


@dataclass(frozen=True)
class Font:
    """The font decorations applied to a cell."""

    bold: bool = False
    italic: bool = False
    underline: bool = False


DEFAULT_FONT = Font()


def _is_set(font_element: etree._Element, tag: str) -> bool:
    flag = font_element.find(f"{{*}}{tag}")
    if flag is None:
        return False
    return flag.get("val", "true").lower() not in _FALSE_VALUES


def _int_attr(element: etree._Element, name: str, default: int = 0) -> int:
    try:
        return int(element.get(name, default))
    except ValueError:
        return default


class StyleTable:
    """Number formats and fonts for each cell style index.

    Built once from the workbook's styles part and read-only afterwards.
    """

    def __init__(self, root: Optional[etree._Element] = None):
        self._num_formats: Dict[int, str] = {}
        self._fonts: List[Font] = []
        self._cell_xfs: List[Tuple[int, int]] = []
        if root is None:
            return

        for num_fmt in root.iterfind("{*}numFmts/{*}numFmt"):
            self._num_formats[_int_attr(num_fmt, "numFmtId")] = num_fmt.get("formatCode", "")

        for font in root.iterfind("{*}fonts/{*}font"):
            self._fonts.append(
                Font(
                    bold=_is_set(font, "b"),
                    italic=_is_set(font, "i"),
                    underline=_is_set(font, "u"),
                )
            )

        for xf in root.iterfind("{*}cellXfs/{*}xf"):
            self._cell_xfs.append((_int_attr(xf, "numFmtId"), _int_attr(xf, "fontId")))

    def __len__(self) -> int:
        return len(self._cell_xfs)

    def num_format_id(self, style_id: int) -> Optional[int]:
        if 0 <= style_id < len(self._cell_xfs):
            return self._cell_xfs[style_id][0]
        return None

    def format_code(self, style_id: int) -> str:
        """Return the number format code for a style index.

        Custom formats take precedence over builtin formats with the same ID
        and unknown styles or formats resolve to ``"General"``.
        """
        format_id = self.num_format_id(style_id)
        if format_id is None:
            format_id = 0
        if format_id in self._num_formats:
            return self._num_formats[format_id]
        return BUILTIN_FORMATS.get(format_id, DEFAULT_FORMAT)

    def format_type(self, style_id: int) -> CellType:
        return format_to_type(self.format_code(style_id))

    def font(self, style_id: int) -> Font:
        """Return the :class:`Font` for a style index, all ``False`` if unknown."""
        if not 0 <= style_id < len(self._cell_xfs):
            return DEFAULT_FONT
        font_id = self._cell_xfs[style_id][1]
        if 0 <= font_id < len(self._fonts):
            return self._fonts[font_id]
        return DEFAULT_FONT
