import contextlib
import logging
import os
import tempfile

import pandas as pd

from .data_loader import column_kind
from .errors import WriteError
from .features import assemble_columns
from .utils import ensure_parent_dir

logger = logging.getLogger(__name__)


def _render_integer(value):
    return str(int(value))


def _render_real(value):
    return repr(float(value))


def _render_boolean(value):
    return '1' if value else '0'


def _render_text(value):
    return str(value)


RENDERERS = {
    'integer': _render_integer,
    'real': _render_real,
    'boolean': _render_boolean,
    'text': _render_text,
}


def _check_integer_only(df: pd.DataFrame, path):
    for col in df.columns:
        series = df[col]
        kind = column_kind(series)
        if kind == 'text':
            raise WriteError(path, f"column '{col}' is text, only integer columns can be written")
        if series.isna().any():
            raise WriteError(path, f"column '{col}' has missing values")
        if kind == 'real' and not (series.astype('float64') % 1 == 0).all():
            raise WriteError(path, f"column '{col}' has non-integer values")


def render_table(df: pd.DataFrame, integer_only=False) -> pd.DataFrame:
    """Render every cell to its text form; missing cells become empty fields."""
    rendered = {}
    for col in df.columns:
        kind = 'integer' if integer_only else column_kind(df[col])
        render = RENDERERS[kind]
        rendered[col] = ['' if pd.isna(value) else render(value) for value in df[col]]
    return pd.DataFrame(rendered, columns=df.columns, dtype=object)


def export_table(df: pd.DataFrame, path, integer_only=False) -> str:
    """
    Write ``df`` to ``path`` as CSV.

    The file is written to a temporary sibling first and moved over the
    target, so the target is either the old file or the complete new one.

    Parameters:
    -----------
    df : pd.DataFrame
        Table to export
    path : str or Path
        Destination file, overwritten if it exists
    integer_only : bool
        Reject any cell that is not an integer before writing

    Raises:
    -------
    WriteError
        When the table cannot be rendered or the file cannot be written
    """
    path = os.fspath(path)
    if integer_only:
        _check_integer_only(df, path)
    rendered = render_table(df, integer_only=integer_only)

    try:
        directory = ensure_parent_dir(path)
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{os.path.basename(path)}.", suffix='.tmp', dir=directory
        )
        try:
            with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
                rendered.to_csv(f, index=False, lineterminator='\n')
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600 files; use the mode open() would give
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(tmp_path, 0o666 & ~umask)
            os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise
    except OSError as e:
        raise WriteError(path, e.strerror or str(e)) from e

    logger.info(f"Wrote {len(df)} rows to {path}")
    return path


def write_submission(ids, predictions, path, id_column='PassengerId', target_column='Survived'):
    """Assemble the two-column submission table and export it."""
    submission = assemble_columns([(id_column, ids), (target_column, predictions)])
    export_table(submission, path, integer_only=True)
    logger.info(f"Submission saved to {path}")
    return submission
