import pytest

from xlsx_parser import xl_cell_to_rowcol, xl_col_to_name, xl_range, xl_rowcol_to_cell
from xlsx_parser.cell import cells_in_range, normalize_ref, xl_col_to_number


def test_cell_refs():
    assert xl_cell_to_rowcol("A1") == (1, 1)
    assert xl_cell_to_rowcol("$AB$12") == (12, 28)
    assert xl_col_to_number("XFD") == 16384
    assert xl_col_to_name(16384) == "XFD"
    assert xl_col_to_name(27, col_abs=True) == "$AA"
    assert xl_rowcol_to_cell(3, 2) == "B3"
    assert xl_rowcol_to_cell(3, 2, row_abs=True, col_abs=True) == "$B$3"
    assert xl_range(1, 1, 5, 8) == "A1:H5"
    assert xl_range(2, 2, 2, 2) == "B2"

    with pytest.raises(IndexError):
        _ = xl_cell_to_rowcol("A0B")
    with pytest.raises(IndexError):
        _ = xl_col_to_name(0)
    with pytest.raises(IndexError):
        _ = xl_rowcol_to_cell(0, 1)


def test_normalize_ref():
    assert normalize_ref("C4") == (4, 3)
    assert normalize_ref(4, 3) == (4, 3)
    assert normalize_ref(4, "C") == (4, 3)
    assert normalize_ref("C", 4) == (4, 3)

    with pytest.raises(IndexError):
        _ = normalize_ref(4)
    with pytest.raises(IndexError):
        _ = normalize_ref(-1, 1)
    with pytest.raises(IndexError):
        _ = normalize_ref(1, "1")


def test_cells_in_range():
    assert cells_in_range("A1:H5") == 40
    assert cells_in_range("B2") == 1
    assert cells_in_range(None) == 0
    assert cells_in_range("") == 0
