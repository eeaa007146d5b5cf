import pendulum
import pytest
import pytest_check as check

from xlsx_parser import Document, EmptyCell, LinkCell, NumberCell

DOCUMENT = "tests/data/basic"

BLANK_ROWS_REF = [
    [1],
    [],
    [3, None, 33],
    [],
    [None, "five", None],
]

BLANK_ROWS_STRIPPED_REF = [
    [1],
    [],
    [3, None, 33],
    [],
    [None, "five"],
]


def test_blank_rows():
    doc = Document(DOCUMENT)
    rows = list(doc.each_row(sheet="Blank Rows"))
    assert len(rows) == 5
    assert rows == BLANK_ROWS_REF

    rows = list(doc.each_row(sheet="Blank Rows", strip_nils=True))
    assert rows == BLANK_ROWS_STRIPPED_REF


def test_max_rows():
    doc = Document(DOCUMENT)
    assert list(doc.each_row(sheet=2, max_rows=2)) == BLANK_ROWS_REF[0:2]
    assert list(doc.each_row(sheet=2, max_rows=4)) == BLANK_ROWS_REF[0:4]
    assert list(doc.each_row(sheet=2, max_rows=10)) == BLANK_ROWS_REF
    assert list(doc.each_row(sheet=2, max_rows=0)) == []


def test_cell_rows():
    doc = Document(DOCUMENT)
    rows = list(doc.each_row(sheet=2, cells=True))
    assert rows[1] == []
    assert isinstance(rows[0][0], NumberCell)
    assert (rows[2][2].row, rows[2][2].col) == (3, 3)
    assert rows[2][1] is None
    assert isinstance(rows[4][2], EmptyCell)

    rows = list(doc.each_row(sheet=2, cells=True, strip_nils=True))
    assert len(rows[4]) == 2
    assert rows[4][1].value == "five"


def test_loaded_rows_restart():
    doc = Document(DOCUMENT)
    rows = doc.each_row()
    first_row = next(rows)
    rows.close()
    assert list(doc.each_row())[0] == first_row


def test_types_rows():
    doc = Document(DOCUMENT)
    rows = list(doc.each_row(sheet="Types"))
    assert len(rows) == 5
    check.equal(rows[0], ["Name", "Hello World", "Inline", "TRUE", "FALSE"])
    check.equal(rows[1][0:3], [42, 3.5, pendulum.date(2023, 3, 15)])
    check.equal(rows[2][2], None)
    check.equal(rows[4], ["Total", 100, 7])


@pytest.mark.parametrize("sheet", ["Types", "Blank Rows", "My Sheet"])
def test_streaming_equivalence(sheet):
    loaded = Document(DOCUMENT)
    minimal = Document(DOCUMENT, minimal_load=True)

    loaded_rows = list(loaded.each_row(sheet=sheet))
    assert list(minimal.each_row(sheet=sheet)) == loaded_rows
    assert list(minimal.each_row_streaming(sheet=sheet)) == loaded_rows

    loaded_rows = list(loaded.each_row(sheet=sheet, cells=True))
    streamed_rows = list(minimal.each_row_streaming(sheet=sheet, cells=True))
    assert len(streamed_rows) == len(loaded_rows)
    for loaded_row, streamed_row in zip(loaded_rows, streamed_rows):
        assert len(loaded_row) == len(streamed_row)
        for loaded_cell, streamed_cell in zip(loaded_row, streamed_row):
            if loaded_cell is None:
                assert streamed_cell is None
                continue
            assert type(loaded_cell) == type(streamed_cell)
            assert loaded_cell.value == streamed_cell.value
            assert loaded_cell.formula == streamed_cell.formula
            assert loaded_cell.font == streamed_cell.font
            assert (loaded_cell.row, loaded_cell.col) == (streamed_cell.row, streamed_cell.col)


def test_streaming_links():
    doc = Document(DOCUMENT, minimal_load=True)
    rows = list(doc.each_row_streaming(sheet="My Sheet", cells=True))
    assert isinstance(rows[0][0], LinkCell)
    assert rows[0][0].url == "https://example.com/"


def test_streaming_max_rows(basic_xlsx):
    doc = Document(basic_xlsx, minimal_load=True)
    rows = list(doc.each_row_streaming(sheet=2, max_rows=3, strip_nils=True))
    assert rows == BLANK_ROWS_STRIPPED_REF[0:3]

    # An abandoned pass does not prevent another
    rows = doc.each_row_streaming(sheet=2)
    _ = next(rows)
    rows.close()
    assert list(doc.each_row_streaming(sheet=2)) == BLANK_ROWS_REF
