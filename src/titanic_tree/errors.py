"""Exceptions raised by the table loading, cleaning and export steps."""


class TableError(Exception):
    """Base class for every table-level failure."""


class LoadError(TableError):
    """Input file is missing, empty or malformed."""


class NotFoundError(TableError, KeyError):
    """A referenced column does not exist in the table."""

    def __init__(self, name, available=None):
        self.name = name
        self.available = list(available) if available is not None else []
        super().__init__(name)

    def __str__(self):
        if self.available:
            return f"column '{self.name}' not found (available: {', '.join(map(str, self.available))})"
        return f"column '{self.name}' not found"


class LengthMismatchError(TableError, ValueError):
    """Columns or masks do not share the table's row count."""


class DuplicateColumnError(TableError, ValueError):
    """A column name appears more than once."""


class WriteError(TableError):
    """Exporting a table to disk failed.

    The underlying OSError (when there is one) is chained as ``__cause__``.
    """

    def __init__(self, path, message):
        self.path = str(path)
        super().__init__(f"could not write {self.path}: {message}")
