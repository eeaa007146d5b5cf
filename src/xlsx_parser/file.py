import logging
import re
from pathlib import Path
from sys import version_info
from typing import IO, Iterator, List, Optional, Union
from zipfile import BadZipFile, ZipFile

from lxml import etree

from xlsx_parser import __name__ as xlsx_parser_name
from xlsx_parser.exceptions import FileError, FileFormatError

logger = logging.getLogger(xlsx_parser_name)
debug = logger.debug

_XML_PARSER_OPTIONS = {"huge_tree": True, "resolve_entities": False, "no_network": True}


def open_zipfile(filepath: Path):
    """Open Zip file with the correct filename encoding supported by current python"""
    # Coverage is python version dependent, so one path with always fail coverage
    if version_info.minor >= 11:  # pragma: no cover
        return ZipFile(filepath, metadata_encoding="utf-8")
    else:  # pragma: no cover
        return ZipFile(filepath)


class PartStore:
    """
    Named XML parts of a spreadsheet package.

    Parts are read on demand either from a zip archive or from a directory
    holding an already-extracted package. Part names always use forward
    slashes and are relative to the package root, e.g. ``xl/workbook.xml``.
    """

    def __init__(self, filepath: Union[str, Path], packed: Optional[bool] = None):
        self._filepath = Path(filepath)
        self._zipf = None
        if not self._filepath.exists():
            raise FileError("no such file or directory")

        if packed is None:
            packed = not self._filepath.is_dir()

        debug("PartStore: path=%s, packed=%s", self._filepath, packed)
        if packed:
            if self._filepath.is_dir():
                raise FileFormatError("invalid spreadsheet document (directory is not an archive)")
            try:
                self._zipf = open_zipfile(self._filepath)
            except BadZipFile:
                raise FileFormatError("invalid spreadsheet document (not a zip archive)") from None
            self._names = [x for x in self._zipf.namelist() if not x.endswith("/")]
        else:
            if not self._filepath.is_dir():
                raise FileFormatError("invalid spreadsheet document (not a package directory)")
            self._names = sorted(
                x.relative_to(self._filepath).as_posix()
                for x in self._filepath.rglob("*")
                if x.is_file()
            )

    @property
    def packed(self) -> bool:
        return self._zipf is not None

    @property
    def names(self) -> List[str]:
        return self._names

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def find(self, pattern: str) -> Optional[str]:
        """Return the first part name matching a case-insensitive regex, or ``None``."""
        regex = re.compile(pattern, re.IGNORECASE)
        for name in self._names:
            if regex.search(name):
                return name
        return None

    def find_all(self, pattern: str) -> List[str]:
        regex = re.compile(pattern, re.IGNORECASE)
        return [name for name in self._names if regex.search(name)]

    def open(self, name: str) -> IO[bytes]:
        """Open a part as a binary stream; the caller closes it."""
        if name not in self._names:
            raise FileFormatError(f"invalid spreadsheet document (missing part '{name}')")
        if self._zipf is not None:
            try:
                return self._zipf.open(name)
            except BadZipFile:
                raise FileFormatError(f"{name}: corrupt archive member") from None
        return (self._filepath / name).open(mode="rb")

    def read(self, name: str) -> bytes:
        with self.open(name) as fh:
            try:
                return fh.read()
            except BadZipFile:
                raise FileFormatError(f"{name}: corrupt archive member") from None

    def close(self) -> None:
        if self._zipf is not None:
            self._zipf.close()
            self._zipf = None


def parse_xml(blob: bytes, part_name: str) -> etree._Element:
    """Parse a complete XML part and return its root element."""
    debug("parse_xml: part=%s, size=%d", part_name, len(blob))
    parser = etree.XMLParser(**_XML_PARSER_OPTIONS)
    try:
        return etree.fromstring(blob, parser=parser)
    except etree.XMLSyntaxError as e:
        raise FileFormatError(f"{part_name}: invalid XML ({e})") from e


def iterparse_xml(
    fh: IO[bytes], part_name: str, tag: str, events=("end",)
) -> Iterator[etree._Element]:
    """
    Yield elements named ``tag`` (in any namespace) from a forward-only cursor.

    Yielded elements are complete for ``end`` events. Elements are cleared,
    along with their preceding siblings, once the consumer moves on so that
    memory use stays flat over large parts.
    """
    context = etree.iterparse(fh, events=events, tag=f"{{*}}{tag}", **_XML_PARSER_OPTIONS)
    try:
        for event, element in context:
            yield element
            if event == "end":
                element.clear()
                while element.getprevious() is not None:
                    del element.getparent()[0]
    except etree.XMLSyntaxError as e:
        raise FileFormatError(f"{part_name}: invalid XML ({e})") from e
    finally:
        del context
