import logging
import posixpath
import re
from collections import namedtuple
from contextlib import closing
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from lxml import etree
from pendulum import Date

from xlsx_parser import __name__ as xlsx_parser_name
from xlsx_parser.cell import Cell, cells_in_range, xl_cell_to_rowcol, xl_col_to_number
from xlsx_parser.constants import (
    EPOCH_1900,
    EPOCH_1904,
    REL_TYPE_COMMENTS,
    REL_TYPE_HYPERLINK,
    REL_TYPE_WORKSHEET,
    RELATIONSHIP_ID_ATTR,
    WORKBOOK_PART,
)
from xlsx_parser.exceptions import ExceedsMaxError, FileFormatError, UnsupportedError
from xlsx_parser.file import PartStore, iterparse_xml, parse_xml
from xlsx_parser.scanner import iter_cells_loaded, iter_rows_loaded, iter_rows_streaming
from xlsx_parser.shared_strings import SharedStringTable, rich_text
from xlsx_parser.styles import StyleTable
from xlsx_parser.xlsx_cache import Cacheable, cache

logger = logging.getLogger(xlsx_parser_name)
debug = logger.debug

Label = namedtuple("Label", ["sheet", "row", "col"])
Relationship = namedtuple("Relationship", ["type", "target", "external"])

_LABEL_REF = re.compile(r"^(?P<sheet>'.+'|[^']+?)!\$(?P<col>[A-Za-z]{1,3})\$(?P<row>\d+)$")
_DATE1904 = re.compile(r"true|1", re.IGNORECASE)

LOADED_ONLY_MSG = "documents not loaded, turn off minimal_load to use this method"
STREAMING_ONLY_MSG = "documents already loaded, turn on minimal_load to use this method"


def _rels_part_name(part_name: str) -> str:
    part_dir, part_file = posixpath.split(part_name)
    return posixpath.join(part_dir, "_rels", part_file + ".rels")


def _resolve_target(part_name: str, target: str) -> str:
    if target.startswith("/"):
        return target.lstrip("/")
    return posixpath.normpath(posixpath.join(posixpath.dirname(part_name), target))


def _part_number(part_name: str) -> int:
    match = re.search(r"(\d+)\.xml$", part_name)
    return int(match.group(1)) if match else 0


class _XlsxModel(Cacheable):
    """Loads the workbook-level parts of a spreadsheet package and provides
    decoding methods for other classes in the module to abstract away the
    package structure.

    Not to be used in application code.
    """

    def __init__(
        self,
        filepath: Path,
        packed: Optional[bool] = None,
        cell_max: Optional[int] = None,
        minimal_load: bool = False,
    ):
        self.parts = PartStore(filepath, packed)
        self.minimal_load = minimal_load

        workbook_part = self.workbook_part()
        self.workbook = parse_xml(self.parts.read(workbook_part), workbook_part)

        if cell_max is not None:
            self.check_cell_max(cell_max)

        self.shared_strings = SharedStringTable(self.optional_part(r"(^|/)sharedstrings\.xml$"))
        self.styles = StyleTable(self.optional_part(r"(^|/)styles\.xml$"))

        self._sheet_roots = {}
        if not minimal_load:
            for sheet_index in range(len(self.sheet_names())):
                part_name = self.sheet_part(sheet_index)
                self._sheet_roots[sheet_index] = parse_xml(self.parts.read(part_name), part_name)

    def close(self) -> None:
        self.parts.close()

    def workbook_part(self) -> str:
        if WORKBOOK_PART in self.parts:
            return WORKBOOK_PART
        part_name = self.parts.find(r"(^|/)workbook\.xml$")
        if part_name is None:
            raise FileFormatError("invalid spreadsheet document (missing workbook)")
        return part_name

    def optional_part(self, pattern: str) -> Optional[etree._Element]:
        part_name = self.parts.find(pattern)
        if part_name is None:
            debug("optional_part: no part matching %s", pattern)
            return None
        return parse_xml(self.parts.read(part_name), part_name)

    @cache()
    def relationships(self, part_name: str) -> Dict[str, Relationship]:
        """Return the relationships of a part keyed by relationship ID."""
        rels_part = _rels_part_name(part_name)
        if rels_part not in self.parts:
            return {}
        root = parse_xml(self.parts.read(rels_part), rels_part)
        rels = {}
        for rel in root.iterfind("{*}Relationship"):
            external = rel.get("TargetMode", "").lower() == "external"
            target = rel.get("Target", "")
            if not external:
                target = _resolve_target(part_name, target)
            rels[rel.get("Id")] = Relationship(rel.get("Type", ""), target, external)
        return rels

    @cache(num_args=0)
    def sheet_names(self) -> List[str]:
        return [sheet.get("name") for sheet in self.workbook.iterfind("{*}sheets/{*}sheet")]

    @cache(num_args=0)
    def sheet_parts(self) -> List[str]:
        """Return the worksheet part name for each sheet, in workbook order."""
        rels = self.relationships(self.workbook_part())
        sheet_parts = []
        for sheet in self.workbook.iterfind("{*}sheets/{*}sheet"):
            rel = rels.get(sheet.get(RELATIONSHIP_ID_ATTR))
            if rel is None or not rel.type.endswith(REL_TYPE_WORKSHEET) or rel.target not in self.parts:
                break
            sheet_parts.append(rel.target)
        else:
            debug("sheet_parts: %s", sheet_parts)
            return sheet_parts

        # No usable relationships: sheetN.xml is the Nth sheet
        numbered = {
            _part_number(x): x for x in self.parts.find_all(r"(^|/)sheet(\d+)\.xml$")
        }
        sheet_parts = [numbered.get(x + 1) for x in range(len(self.sheet_names()))]
        debug("sheet_parts: numbered %s", sheet_parts)
        return sheet_parts

    def sheet_part(self, sheet_index: int) -> str:
        part_name = self.sheet_parts()[sheet_index]
        if part_name is None:
            raise FileFormatError(f"invalid spreadsheet document (missing sheet {sheet_index + 1})")
        return part_name

    @property
    @cache(num_args=0)
    def base_date(self) -> Date:
        """The date of serial day zero: 1899-12-30, or 1904-01-01 for 1904 date system workbooks."""
        base_date = EPOCH_1900
        for workbook_pr in self.workbook.iterfind("{*}workbookPr"):
            date1904 = workbook_pr.get("date1904")
            if date1904 is not None and _DATE1904.search(date1904):
                base_date = EPOCH_1904
        return base_date

    def dimension(self, sheet_index: int) -> Optional[str]:
        """Return a sheet's declared dimension range without reading its rows."""
        part_name = self.sheet_part(sheet_index)
        with self.parts.open(part_name) as fh, closing(
            iterparse_xml(fh, part_name, "dimension", events=("start",))
        ) as elements:
            for element in elements:
                return element.get("ref")
        return None

    def check_cell_max(self, cell_max: int) -> None:
        for sheet_index, sheet_name in enumerate(self.sheet_names()):
            cell_count = cells_in_range(self.dimension(sheet_index))
            debug("check_cell_max: sheet=%s, cells=%d", sheet_name, cell_count)
            if cell_count > cell_max:
                raise ExceedsMaxError(f"Excel file exceeds cell maximum: {cell_count} > {cell_max}")

    def sheet_root(self, sheet_index: int) -> etree._Element:
        if self.minimal_load:
            raise UnsupportedError(LOADED_ONLY_MSG)
        return self._sheet_roots[sheet_index]

    @cache()
    def sheet_hyperlinks(self, sheet_index: int) -> Dict[Tuple[int, int], str]:
        """Map each cell covered by an external hyperlink to its target."""
        part_name = self.sheet_part(sheet_index)
        rels = self.relationships(part_name)
        if not any(x.type.endswith(REL_TYPE_HYPERLINK) for x in rels.values()):
            return {}

        hyperlinks = {}

        def add_hyperlinks(elements):
            for element in elements:
                rel = rels.get(element.get(RELATIONSHIP_ID_ATTR))
                if rel is None or not element.get("ref"):
                    continue
                refs = element.get("ref").split(":")
                first_row, first_col = xl_cell_to_rowcol(refs[0])
                last_row, last_col = xl_cell_to_rowcol(refs[-1])
                for row in range(first_row, last_row + 1):
                    for col in range(first_col, last_col + 1):
                        hyperlinks[(row, col)] = rel.target

        if self.minimal_load:
            with self.parts.open(part_name) as fh:
                add_hyperlinks(iterparse_xml(fh, part_name, "hyperlink"))
        else:
            add_hyperlinks(self.sheet_root(sheet_index).iterfind("{*}hyperlinks/{*}hyperlink"))
        return hyperlinks

    def sheet_cells(self, sheet_index: int) -> Iterator[Cell]:
        root = self.sheet_root(sheet_index)
        return iter_cells_loaded(root, self, self.sheet_hyperlinks(sheet_index))

    def iter_rows_loaded(self, sheet_index: int, cells: bool = False):
        if self.minimal_load:
            raise UnsupportedError(LOADED_ONLY_MSG)
        root = self.sheet_root(sheet_index)
        return iter_rows_loaded(root, self, self.sheet_hyperlinks(sheet_index), cells)

    def iter_rows_streaming(self, sheet_index: int, cells: bool = False):
        if not self.minimal_load:
            raise UnsupportedError(STREAMING_ONLY_MSG)
        part_name = self.sheet_part(sheet_index)
        return self._stream_rows(part_name, self.sheet_hyperlinks(sheet_index), cells)

    def _stream_rows(self, part_name: str, hyperlinks, cells: bool):
        with self.parts.open(part_name) as fh:
            yield from iter_rows_streaming(fh, part_name, self, hyperlinks, cells)

    @cache(num_args=0)
    def related_comments_parts(self) -> Dict[int, str]:
        """Return the comments part of each sheet that has one through its relationships."""
        comments_parts = {}
        for sheet_index, part_name in enumerate(self.sheet_parts()):
            if part_name is None:
                continue
            for rel in self.relationships(part_name).values():
                if rel.type.endswith(REL_TYPE_COMMENTS) and rel.target in self.parts:
                    comments_parts[sheet_index] = rel.target
        return comments_parts

    def comments_part(self, sheet_index: int) -> Optional[str]:
        comments_parts = self.related_comments_parts()
        if comments_parts:
            return comments_parts.get(sheet_index)
        # No relationships: commentsN.xml belongs to the Nth sheet
        for comments_part in self.parts.find_all(r"(^|/)comments(\d+)\.xml$"):
            if _part_number(comments_part) == sheet_index + 1:
                return comments_part
        return None

    @cache()
    def sheet_comments(self, sheet_index: int) -> Dict[Tuple[int, int], str]:
        if self.minimal_load:
            raise UnsupportedError(LOADED_ONLY_MSG)
        part_name = self.comments_part(sheet_index)
        if part_name is None:
            return {}

        debug("sheet_comments: sheet=%d, part=%s", sheet_index, part_name)
        root = parse_xml(self.parts.read(part_name), part_name)
        comments = {}
        for comment in root.iterfind("{*}commentList/{*}comment"):
            text = comment.find("{*}text")
            comments[xl_cell_to_rowcol(comment.get("ref"))] = "" if text is None else rich_text(text)
        return comments

    @cache(num_args=0)
    def labels(self) -> Dict[str, Label]:
        """Return the single-cell defined names of the workbook."""
        labels = {}
        for defined_name in self.workbook.iterfind("{*}definedNames/{*}definedName"):
            match = _LABEL_REF.match((defined_name.text or "").strip())
            if match is None:
                debug("labels: skipping '%s'", defined_name.get("name"))
                continue
            sheet = match.group("sheet")
            if sheet.startswith("'"):
                sheet = sheet[1:-1].replace("''", "'")
            labels[defined_name.get("name")] = Label(
                sheet, int(match.group("row")), xl_col_to_number(match.group("col"))
            )
        return labels
