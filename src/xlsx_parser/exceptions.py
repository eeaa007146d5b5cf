class XlsxError(Exception):
    """Base class for other exceptions."""


class UnsupportedError(XlsxError):
    """Raised for operations not available in the current load mode."""


class FileError(XlsxError):
    """Raised for IO and other OS errors."""


class FileFormatError(XlsxError):
    """Raised for parsing errors during file load."""


class ExceedsMaxError(XlsxError):
    """Raised when a sheet declares more cells than the configured maximum."""


class SheetError(XlsxError, KeyError):
    """Raised for unknown sheet names or indexes."""

    def __str__(self) -> str:
        # KeyError quotes its message
        return str(self.args[0]) if self.args else ""


class UnsupportedWarning(Warning):
    """Raised for unsupported file format features."""
