from typing import Iterator, Union

from xlsx_parser.exceptions import SheetError


class ItemsList:
    def __init__(self, model, refs, item_class):
        self._item_name = item_class.__name__.lower()
        self._items = [item_class(model, id) for id in refs]

    def __getitem__(self, key: Union[int, str]):
        if isinstance(key, int):
            if key < 0:
                key += len(self._items)
            if key < 0 or key >= len(self._items):
                raise IndexError(f"index {key} out of range")
            return self._items[key]
        elif isinstance(key, str):
            for item in self._items:
                if item.name == key:
                    return item
            raise SheetError(f"no {self._item_name} named '{key}'")
        else:
            t = type(key).__name__
            raise LookupError(f"invalid index type {t}")

    def __iter__(self) -> Iterator:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key):
        return key.lower() in [x.name.lower() for x in self._items]

    def lookup(self, key: Union[int, str]):
        """Return an item by name or by 1-based position.

        Raises
        ------
        SheetError:
            If no item has that name or position.
        """
        if isinstance(key, bool) or not isinstance(key, (int, str)):
            raise SheetError(f"invalid {self._item_name} reference {key!r}")
        if isinstance(key, int):
            if key < 1 or key > len(self._items):
                raise SheetError(f"{self._item_name} index {key} out of range")
            return self._items[key - 1]
        return self[key]
