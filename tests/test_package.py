import shutil
from zipfile import ZipFile

import pytest

from xlsx_parser import Document, ExceedsMaxError, FileError, FileFormatError
from xlsx_parser.file import PartStore

DOCUMENT = "tests/data/basic"


def test_invalid_packages(tmp_path):
    with pytest.raises(FileError) as e:
        _ = Document("tests/data/NOT-FOUND.xlsx")
    assert "no such file or directory" in str(e)

    not_a_zip = tmp_path / "invalid.xlsx"
    not_a_zip.write_text("not a spreadsheet")
    with pytest.raises(FileFormatError) as e:
        _ = Document(not_a_zip)
    assert "invalid spreadsheet document (not a zip archive)" in str(e)

    with pytest.raises(FileFormatError) as e:
        _ = Document(DOCUMENT, packed=True)
    assert "directory is not an archive" in str(e)

    with pytest.raises(FileFormatError) as e:
        _ = Document(not_a_zip, packed=False)
    assert "not a package directory" in str(e)

    no_workbook = tmp_path / "no-workbook.xlsx"
    with ZipFile(no_workbook, "w") as zipf:
        zipf.writestr("xl/styles.xml", "<styleSheet/>")
    with pytest.raises(FileFormatError) as e:
        _ = Document(no_workbook)
    assert "missing workbook" in str(e)


def test_malformed_xml(tmp_path):
    broken = tmp_path / "broken"
    shutil.copytree(DOCUMENT, broken)
    (broken / "xl/worksheets/sheet2.xml").write_text("<worksheet><sheetData><row r='1'>")

    with pytest.raises(FileFormatError) as e:
        _ = Document(broken)
    assert "xl/worksheets/sheet2.xml: invalid XML" in str(e)

    doc = Document(broken, minimal_load=True)
    assert list(doc.each_row(sheet=1))[4] == ["Total", 100, 7]
    with pytest.raises(FileFormatError):
        _ = list(doc.each_row(sheet=2))


def test_cell_max(basic_xlsx):
    with pytest.raises(ExceedsMaxError) as e:
        _ = Document(basic_xlsx, cell_max=39)
    assert "Excel file exceeds cell maximum: 40 > 39" in str(e)

    doc = Document(basic_xlsx, cell_max=40)
    assert doc.cell("B5") == 100
    assert doc.sheets[0]._cell_store.scan_count == 1


def test_cell_max_before_scan(tmp_path):
    # Rows are never parsed when the declared dimension is too large
    broken = tmp_path / "broken"
    shutil.copytree(DOCUMENT, broken)
    sheet_xml = (broken / "xl/worksheets/sheet2.xml").read_text()
    sheet_xml = sheet_xml.replace('ref="A1:C5"', 'ref="A1:Z1000"')
    sheet_xml = sheet_xml.replace("</worksheet>", "")
    (broken / "xl/worksheets/sheet2.xml").write_text(sheet_xml)

    with pytest.raises(ExceedsMaxError) as e:
        _ = Document(broken, cell_max=1000)
    assert "26000 > 1000" in str(e)


def test_part_store(basic_xlsx):
    for filename in [DOCUMENT, basic_xlsx]:
        parts = PartStore(filename)
        assert "xl/workbook.xml" in parts
        assert "[Content_Types].xml" in parts
        assert parts.find(r"sharedstrings\.xml$") == "xl/sharedStrings.xml"
        assert parts.find(r"missing\.xml$") is None
        assert parts.find_all(r"sheet\d+\.xml$") == [
            "xl/worksheets/sheet1.xml",
            "xl/worksheets/sheet2.xml",
            "xl/worksheets/sheet3.xml",
        ]
        assert parts.read("xl/workbook.xml").startswith(b"<?xml")
        with pytest.raises(FileFormatError) as e:
            _ = parts.read("xl/missing.xml")
        assert "missing part 'xl/missing.xml'" in str(e)
        parts.close()

    assert PartStore(basic_xlsx).packed
    assert not PartStore(DOCUMENT).packed
