from enum import IntEnum

import enum_tools.documentation
from pendulum import date

__all__ = [
    "CellType",
]

# XML namespaces
RELATIONSHIP_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RELATIONSHIP_ID_ATTR = f"{{{RELATIONSHIP_NS}}}id"

# Relationship type suffixes
REL_TYPE_WORKSHEET = "/worksheet"
REL_TYPE_COMMENTS = "/comments"
REL_TYPE_HYPERLINK = "/hyperlink"

# Package part names
WORKBOOK_PART = "xl/workbook.xml"

# System constants
EPOCH_1900 = date(1899, 12, 30)
EPOCH_1904 = date(1904, 1, 1)
SECONDS_IN_MINUTE = 60
SECONDS_IN_HOUR = SECONDS_IN_MINUTE * 60
SECONDS_IN_DAY = SECONDS_IN_HOUR * 24
DATE_FRACTION_PRECISION = 6

DEFAULT_FORMAT = "General"

# Format codes that are ambiguous under the general heuristics
EXCEPTIONAL_FORMATS = {
    "h:mm am/pm": "date",
    "h:mm:ss am/pm": "date",
}

BUILTIN_FORMATS = {
    0: "General",
    1: "0",
    2: "0.00",
    3: "#,##0",
    4: "#,##0.00",
    9: "0%",
    10: "0.00%",
    11: "0.00E+00",
    12: "# ?/?",
    13: "# ??/??",
    14: "mm-dd-yy",
    15: "d-mmm-yy",
    16: "d-mmm",
    17: "mmm-yy",
    18: "h:mm AM/PM",
    19: "h:mm:ss AM/PM",
    20: "h:mm",
    21: "h:mm:ss",
    22: "m/d/yy h:mm",
    37: "#,##0 ;(#,##0)",
    38: "#,##0 ;[Red](#,##0)",
    39: "#,##0.00;(#,##0.00)",
    40: "#,##0.00;[Red](#,##0.00)",
    45: "mm:ss",
    46: "[h]:mm:ss",
    47: "mmss.0",
    48: "##0.0E+0",
    49: "@",
}

BOOLEAN_TRUE_VALUE = "TRUE"
BOOLEAN_FALSE_VALUE = "FALSE"


@enum_tools.documentation.document_enum
class CellType(IntEnum):
    """
    The decoded type of a cell.

    ``Cell.type`` always reports the type of the stored value. The
    :py:meth:`~xlsx_parser.Document.celltype` query reports ``FORMULA``
    for any cell that carries a formula.
    """

    EMPTY = 1
    """The cell has no value."""
    FLOAT = 2
    """An integer or floating point number."""
    STRING = 3
    """Shared, inline or formula string."""
    BOOLEAN = 4
    """A boolean, stored as the string ``"TRUE"`` or ``"FALSE"``."""
    DATE = 5
    """A calendar date."""
    TIME = 6
    """A time of day in seconds."""
    DATETIME = 7
    """A date with a time of day."""
    PERCENTAGE = 8
    """A fraction formatted as a percentage."""
    FORMULA = 9
    """The cell contains a formula."""
    LINK = 10
    """The cell text is an external hyperlink."""
