from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

import pytest

DATA_DIR = Path("tests/data")


def pytest_addoption(parser):
    parser.addoption(
        "--max-check-fails",
        default=False,
        type=int,
        help="maximum number of pytest.check failures",
    )


def pack_document(src_dir: Path, filename: Path) -> Path:
    with ZipFile(filename, "w", compression=ZIP_DEFLATED) as zipf:
        for part in sorted(src_dir.rglob("*")):
            if part.is_file():
                zipf.write(part, arcname=part.relative_to(src_dir).as_posix())
    return filename


@pytest.fixture(name="xlsx_file")
def xlsx_file_fixture(tmp_path):
    """Return a function that packs an extracted test document into an .xlsx file."""

    def _xlsx_file(name: str) -> Path:
        return pack_document(DATA_DIR / name, tmp_path / f"{name}.xlsx")

    return _xlsx_file


@pytest.fixture(name="basic_xlsx")
def basic_xlsx_fixture(xlsx_file):
    return xlsx_file("basic")
