"""Parse and extract data from Excel (.xlsx) spreadsheets."""

import importlib.metadata

from xlsx_parser.cell import *  # noqa: F403
from xlsx_parser.constants import *  # noqa: F403
from xlsx_parser.document import *  # noqa: F403
from xlsx_parser.exceptions import *  # noqa: F403
from xlsx_parser.styles import Font, format_to_type  # noqa: F401

__version__ = importlib.metadata.version("xlsx-parser")


def _get_version() -> str:
    return __version__
