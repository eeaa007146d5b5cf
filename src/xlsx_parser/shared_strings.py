from typing import List, Optional

from lxml import etree

__all__ = ["SharedStringTable", "rich_text"]


def rich_text(element: etree._Element) -> str:
    """Join the text of a string item.

    A string item holds either a single ``t`` element or a sequence of
    formatted ``r`` runs, each with its own ``t``. Phonetic hints (``rPh``)
    are not part of the displayed text.
    """
    parts = []
    for child in element:
        if not isinstance(child.tag, str):
            continue
        tag = etree.QName(child).localname
        if tag == "t":
            parts.append(child.text or "")
        elif tag == "r":
            parts.extend(t.text or "" for t in child.iterfind("{*}t"))
    return "".join(parts)


class SharedStringTable:
    """Workbook-wide pool of de-duplicated strings referenced by index."""

    def __init__(self, root: Optional[etree._Element] = None):
        self._strings: List[str] = []
        if root is not None:
            self._strings = [rich_text(si) for si in root.iterfind("{*}si")]

    def __len__(self) -> int:
        return len(self._strings)

    def __getitem__(self, index: int) -> str:
        return self.get(index)

    def get(self, index: int) -> str:
        """Return the string at ``index``.

        Raises
        ------
        IndexError:
            If ``index`` is outside the table, which only happens for
            malformed documents.
        """
        if index < 0 or index >= len(self._strings):
            raise IndexError(f"shared string {index} out of range")
        return self._strings[index]
