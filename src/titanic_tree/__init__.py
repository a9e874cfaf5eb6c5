"""Decision-tree survival predictions for the Titanic dataset."""

from .data_loader import load_table
from .errors import (DuplicateColumnError, LengthMismatchError, LoadError, NotFoundError,
                     TableError, WriteError)
from .features import (MissingValueHandler, assemble_columns, filter_by_presence, handle_missing,
                       presence_mask, remove_column)
from .model import predict, train_classifier
from .submission import export_table, write_submission

__version__ = "0.1.0"
