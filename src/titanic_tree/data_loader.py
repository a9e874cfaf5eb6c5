import csv
import logging
import math
import os
import re

import pandas as pd
from pandas.api import types as ptypes

from .errors import LoadError, NotFoundError

logger = logging.getLogger(__name__)

NA_VALUES = ['', 'NA', 'N/A', 'n/a', 'na', 'NaN', 'nan', 'null', 'NULL']
COLUMN_KINDS = ('integer', 'real', 'text')

_INTEGER_PATTERN = r'[+-]?\d+'
_INT64_MIN, _INT64_MAX = -2 ** 63, 2 ** 63 - 1


def column_kind(series: pd.Series) -> str:
    """Semantic type of a column: 'integer', 'real', 'boolean' or 'text'."""
    if ptypes.is_bool_dtype(series.dtype):
        return 'boolean'
    if ptypes.is_integer_dtype(series.dtype):
        return 'integer'
    if ptypes.is_float_dtype(series.dtype):
        return 'real'
    return 'text'


def _fits_int64(text: str) -> bool:
    return _INT64_MIN <= int(text) <= _INT64_MAX


def infer_kind(values: pd.Series) -> str:
    """Pick the narrowest kind that every present cell parses as."""
    present = values.dropna().astype(str).str.strip()
    if present.empty:
        return 'real'
    numeric = pd.to_numeric(present, errors='coerce')
    if numeric.isna().any():
        return 'text'
    # Integers wider than int64 are kept as reals
    if present.str.fullmatch(_INTEGER_PATTERN).all() and present.map(_fits_int64).all():
        return 'integer'
    return 'real'


def parse_integer(value):
    """Exact integer value of a cell, or None when it holds no int64."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if re.fullmatch(_INTEGER_PATTERN, text):
        number = int(text)
    else:
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number) or number % 1 != 0:
            return None
        number = int(number)
    return number if _INT64_MIN <= number <= _INT64_MAX else None


def coerce_column(values: pd.Series, kind: str) -> pd.Series:
    """
    Convert a column of raw strings to the given kind.

    Cells that cannot be parsed as the requested kind become missing.
    """
    if kind == 'text':
        return values.astype('string')
    if kind == 'integer':
        parsed = [parse_integer(v) for v in values]
        return pd.Series(pd.array(parsed, dtype='Int64'), index=values.index)
    if kind == 'real':
        stripped = values.map(lambda v: v.strip() if isinstance(v, str) else v)
        return pd.to_numeric(stripped, errors='coerce').astype('float64').astype('Float64')
    raise ValueError(f"Unknown column kind '{kind}', expected one of {COLUMN_KINDS}")


def _check_shape(file_path):
    """Read the header and make sure every row has the same number of fields."""
    try:
        with open(file_path, newline='', encoding='utf-8') as f:
            reader = csv.reader(f)
            header = next(reader, None)
            if not header:
                raise LoadError(f"{file_path} is empty")
            seen = set()
            for name in header:
                if name in seen:
                    raise LoadError(f"{file_path}: duplicate column '{name}' in header")
                seen.add(name)
            width = len(header)
            for record in reader:
                if not record:
                    continue
                if len(record) != width:
                    raise LoadError(
                        f"{file_path}: line {reader.line_num} has {len(record)} fields, expected {width}"
                    )
    except (UnicodeDecodeError, csv.Error) as e:
        raise LoadError(f"{file_path}: {e}") from e
    return header


def load_table(file_path, dtypes=None, na_values=None) -> pd.DataFrame:
    """
    Load a delimited file with a header row into a typed table.

    Parameters:
    -----------
    file_path : str or Path
        CSV file to read
    dtypes : dict, optional
        Column name -> 'integer' | 'real' | 'text', overriding inference
    na_values : list, optional
        Strings treated as missing cells (defaults to NA_VALUES)

    Returns:
    --------
    pd.DataFrame with nullable Int64 / Float64 / string columns
    """
    file_path = str(file_path)
    logger.info(f"Loading data from {file_path}")

    if not os.path.exists(file_path):
        raise LoadError(f"{file_path} does not exist")
    if not os.path.isfile(file_path):
        raise LoadError(f"{file_path} is not a file")

    header = _check_shape(file_path)
    dtypes = dict(dtypes or {})
    for name, kind in dtypes.items():
        if name not in header:
            raise NotFoundError(name, header)
        if kind not in COLUMN_KINDS:
            raise ValueError(f"Unknown column kind '{kind}' for '{name}', expected one of {COLUMN_KINDS}")

    try:
        raw = pd.read_csv(
            file_path,
            dtype=str,
            keep_default_na=False,
            na_values=NA_VALUES if na_values is None else na_values,
            skip_blank_lines=True,
            encoding='utf-8',
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise LoadError(f"{file_path}: {e}") from e

    df = pd.DataFrame(
        {
            name: coerce_column(raw[name], dtypes.get(name) or infer_kind(raw[name]))
            for name in raw.columns
        }
    )

    logger.info(f"Data shape: {df.shape}")
    missing_values = df.isna().sum()
    missing_values = missing_values[missing_values > 0]
    if len(missing_values) > 0:
        logger.warning(f"Missing values detected: {missing_values.to_dict()}")

    return df


def load_data(train_path, test_path):
    """Load the training and test tables."""
    train = load_table(train_path)
    test = load_table(test_path)
    return train, test
