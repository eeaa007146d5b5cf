import pytest
import pytest_check as check

from xlsx_parser import (
    CellType,
    Document,
    EmptyCell,
    Label,
    SheetError,
    UnsupportedError,
    XlsxError,
)

DOCUMENT = "tests/data/basic"


def test_sheets():
    doc = Document(DOCUMENT)
    assert doc.sheet_names == ["Types", "Blank Rows", "My Sheet"]
    assert len(doc.sheets) == 3
    assert [sheet.index for sheet in doc.sheets] == [1, 2, 3]
    assert doc.sheets[1].name == "Blank Rows"
    assert doc.sheets[-1].name == "My Sheet"
    assert doc.sheets["My Sheet"].index == 3
    assert "blank rows" in doc.sheets
    assert doc.sheet(2).name == "Blank Rows"
    assert doc.sheet("Types").name == "Types"
    assert doc.sheet().name == "Types"


def test_default_sheet():
    doc = Document(DOCUMENT)
    assert doc.default_sheet.name == "Types"
    assert doc.cell(1, 1) == "Name"

    doc.default_sheet = "Blank Rows"
    assert doc.default_sheet.name == "Blank Rows"
    assert doc.cell(1, 1) == 1

    doc.default_sheet = 3
    assert doc.cell(1, 1) == "Link text"

    doc.default_sheet = doc.sheets[0]
    assert doc.cell(1, 1) == "Name"


def test_sheet_errors():
    doc = Document(DOCUMENT)
    with pytest.raises(SheetError) as e:
        _ = doc.cell(1, 1, sheet="Missing")
    assert "no sheet named 'Missing'" in str(e)

    with pytest.raises(SheetError) as e:
        _ = doc.cell(1, 1, sheet=4)
    assert "sheet index 4 out of range" in str(e)

    with pytest.raises(SheetError):
        _ = doc.sheet(0)

    with pytest.raises(KeyError):
        doc.default_sheet = "Missing"

    with pytest.raises(XlsxError):
        _ = doc.sheet(1.5)

    with pytest.raises(IndexError):
        _ = doc.sheets[3]


def test_cell_references():
    doc = Document(DOCUMENT)
    check.equal(doc.cell(2, 1), 42)
    check.equal(doc.cell(2, "A"), 42)
    check.equal(doc.cell("A", 2), 42)
    check.equal(doc.cell("A2"), 42)
    check.equal(doc.cell("a2"), 42)
    check.equal(doc.cell("B5", sheet="Types"), 100)
    check.equal(doc.cell(3, "C", sheet=2), 33)
    check.is_none(doc.cell(100, 100))

    with pytest.raises(IndexError) as e:
        _ = doc.cell(0, 1)
    assert "row reference 0 below one" in str(e)

    with pytest.raises(IndexError) as e:
        _ = doc.cell(1, 0)
    assert "column reference 0 below one" in str(e)

    with pytest.raises(IndexError):
        _ = doc.cell("1A")

    with pytest.raises(IndexError):
        _ = doc.cell(1)


def test_absent_cells():
    doc = Document(DOCUMENT)
    cell = doc.sheets[0].cell(50, 2)
    assert isinstance(cell, EmptyCell)
    assert (cell.row, cell.col) == (50, 2)
    assert doc.celltype(50, 2) == CellType.EMPTY
    assert doc.formula(50, 2) is None
    assert doc.raw_type(50, 2) is None
    assert doc.format(50, 2) == "General"


def test_formulas():
    doc = Document(DOCUMENT)
    assert doc.formulas() == [
        (3, 1, "CONCATENATE(A1,C1)"),
        (3, 2, "A2*2"),
        (3, 3, "SUM(A2:B2)"),
        (3, 4, "1/0"),
    ]
    assert doc.formulas(sheet="Blank Rows") == []


def test_labels():
    doc = Document(DOCUMENT)
    assert doc.label("Total") == Label("Types", 5, 2)
    assert doc.label("Greeting") == Label(sheet="My Sheet", row=1, col=1)
    assert doc.label("Block") is None
    assert doc.label("Rate") is None
    assert doc.label("Missing") is None
    assert sorted(doc.labels.keys()) == ["Greeting", "Total"]

    label = doc.label("Total")
    assert doc.cell(label.row, label.col, sheet=label.sheet) == 100
    label = doc.label("Greeting")
    assert doc.cell(label.row, label.col, sheet=label.sheet) == "Link text"


def test_comments():
    doc = Document(DOCUMENT)
    sheet = doc.sheets["My Sheet"]
    assert sheet.comment(2, 1) == "Alice: check this"
    assert sheet.comment("B2") == "Plain note"
    assert sheet.comment(1, 1) is None
    assert doc.comment(2, 2, sheet=3) == "Plain note"
    assert doc.comments(sheet="My Sheet") == [
        (2, 1, "Alice: check this"),
        (2, 2, "Plain note"),
    ]
    assert doc.comments() == []
    assert doc.comment(1, 1) is None


def test_dimensions():
    doc = Document(DOCUMENT)
    assert doc.dimensions() == "A1:H5"
    assert doc.dimensions(sheet=2) == "A1:C5"
    assert doc.dimensions(sheet="My Sheet") == "A1:B2"

    doc = Document("tests/data/date1904")
    assert doc.dimensions() is None


def test_packed_documents(basic_xlsx):
    unpacked = Document(DOCUMENT)
    with Document(basic_xlsx) as packed:
        assert packed.sheet_names == unpacked.sheet_names
        for sheet in unpacked.sheets:
            packed_rows = list(packed.each_row(sheet=sheet.name))
            assert packed_rows == list(sheet.each_row())
        assert packed.labels == unpacked.labels
        assert packed.comments(sheet=3) == unpacked.comments(sheet=3)
        assert packed.formulas() == unpacked.formulas()

    with Document(basic_xlsx, packed=True) as packed:
        assert packed.cell("B5") == 100

    with Document(DOCUMENT, packed=False) as unpacked:
        assert unpacked.cell("B5") == 100


def test_minimal_load():
    doc = Document(DOCUMENT, minimal_load=True)
    assert doc.sheet_names == ["Types", "Blank Rows", "My Sheet"]
    assert doc.label("Total") == Label("Types", 5, 2)
    assert doc.dimensions() == "A1:H5"

    with pytest.raises(UnsupportedError) as e:
        _ = doc.cell(1, 1)
    assert "turn off minimal_load" in str(e)

    with pytest.raises(UnsupportedError):
        _ = doc.celltype(1, 1)

    with pytest.raises(UnsupportedError):
        _ = doc.formulas()

    with pytest.raises(UnsupportedError):
        _ = doc.comment(2, 1, sheet=3)

    doc = Document(DOCUMENT)
    with pytest.raises(UnsupportedError) as e:
        _ = doc.each_row_streaming()
    assert "turn on minimal_load" in str(e)
