import argparse
import csv
import logging
import sys

from xlsx_parser import Document, _get_version
from xlsx_parser import __name__ as xlsx_parser_name
from xlsx_parser.exceptions import XlsxError

logger = logging.getLogger(xlsx_parser_name)


def command_line_parser():
    parser = argparse.ArgumentParser(description="Export data from Excel spreadsheets")
    commands = parser.add_mutually_exclusive_group()
    commands.add_argument(
        "-S",
        "--list-sheets",
        action="store_true",
        help="List the names of sheets and exit",
    )
    commands.add_argument(
        "-b",
        "--brief",
        action="store_true",
        default=False,
        help="Don't prefix data rows with name of sheet (default: false)",
    )
    parser.add_argument("-V", "--version", action="store_true")
    parser.add_argument(
        "--formulas",
        action="store_true",
        help="Dump formulas instead of formula results",
    )
    parser.add_argument(
        "--minimal",
        action="store_true",
        help="Read rows in a single pass without loading sheets",
    )
    parser.add_argument(
        "-s", "--sheet", action="append", help="Names of sheet(s) to include in export"
    )
    parser.add_argument("document", nargs="*", help="Document(s) to export")
    parser.add_argument(
        "--debug", default=False, action="store_true", help="Enable debug logging"
    )
    return parser


def print_sheet_names(filename):
    with Document(filename, minimal_load=True) as doc:
        for sheet in doc.sheets:
            print(f"{filename}: {sheet.name}")


def cell_as_string(args, cell):
    if cell is None:
        return ""
    elif args.formulas and cell.formula is not None:
        return cell.formula
    elif cell.value is None:
        return ""
    else:
        return str(cell.value)


def print_sheet(args, filename):
    writer = csv.writer(sys.stdout, dialect="excel")
    with Document(filename, minimal_load=args.minimal) as doc:
        for sheet in doc.sheets:
            if args.sheet is not None and sheet.name not in args.sheet:
                continue
            for row in sheet.each_row(cells=True):
                cells = [cell_as_string(args, cell) for cell in row]
                if not args.brief:
                    sys.stdout.write(f"{filename}: {sheet.name}: ")
                writer.writerow(cells)


def main():
    parser = command_line_parser()
    args = parser.parse_args()

    if args.version:
        print(_get_version())
    elif len(args.document) == 0:
        parser.print_help()
    else:
        hdlr = logging.StreamHandler()
        hdlr.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
        logger.addHandler(hdlr)
        if args.debug:
            logger.setLevel("DEBUG")
        else:
            logger.setLevel("ERROR")
        for filename in args.document:
            try:
                if args.list_sheets:
                    print_sheet_names(filename)
                else:
                    print_sheet(args, filename)
            except XlsxError as e:
                print(f"{filename}:", str(e), file=sys.stderr)
                sys.exit(1)


if __name__ == "__main__":
    # execute only if run as a script
    main()  # pragma: no cover
