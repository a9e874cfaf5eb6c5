# ===== features.py =====
import logging
import numbers

import numpy as np
import pandas as pd
from pandas.api import types as ptypes
from pandas.api.extensions import ExtensionArray

from .data_loader import column_kind
from .errors import DuplicateColumnError, LengthMismatchError, NotFoundError

logger = logging.getLogger(__name__)

IMPUTATION_STRATEGIES = ('drop', 'constant', 'mean', 'median', 'most_frequent')


def _require_column(df: pd.DataFrame, name):
    if name not in df.columns:
        raise NotFoundError(name, df.columns)


def _check_fill_value(series: pd.Series, value):
    """Make sure ``value`` can be stored in a column of this kind."""
    kind = column_kind(series)
    if kind in ('integer', 'real') and (
            not isinstance(value, numbers.Real) or isinstance(value, bool)):
        raise ValueError(f"Fill value {value!r} does not fit numeric column '{series.name}'")
    if kind == 'boolean' and value not in (True, False, 0, 1):
        raise ValueError(f"Fill value {value!r} does not fit boolean column '{series.name}'")


def remove_column(df: pd.DataFrame, name) -> pd.DataFrame:
    """Return a copy of ``df`` without column ``name``."""
    _require_column(df, name)
    return df.drop(columns=[name])


def remove_columns(df: pd.DataFrame, names) -> pd.DataFrame:
    for name in names:
        df = remove_column(df, name)
    return df


def presence_mask(df: pd.DataFrame, column) -> pd.Series:
    """Boolean mask, True where ``column`` holds a value."""
    _require_column(df, column)
    return df[column].notna()


def apply_mask(df: pd.DataFrame, mask) -> pd.DataFrame:
    """Keep the rows where ``mask`` is True, in their original order."""
    mask = np.asarray(mask, dtype=bool)
    if len(mask) != len(df):
        raise LengthMismatchError(f"mask has {len(mask)} entries but table has {len(df)} rows")
    return df.loc[mask].reset_index(drop=True)


def filter_by_presence(df: pd.DataFrame, column) -> pd.DataFrame:
    """Drop every row whose ``column`` value is missing."""
    mask = presence_mask(df, column)
    dropped = int((~mask).sum())
    if dropped:
        logger.info(f"Dropping {dropped} of {len(df)} rows with missing {column}")
    return apply_mask(df, mask)


class MissingValueHandler:
    """
    Handles missing values in a single column.

    The fill value is learned from the table passed to ``fit`` and the same
    value is reused by ``transform``, so train and test get identical fills.
    With the 'drop' strategy ``transform`` removes incomplete rows instead.
    """

    def __init__(self, column, strategy='drop', fill_value=None):
        if strategy not in IMPUTATION_STRATEGIES:
            raise ValueError(f"Unknown strategy '{strategy}', expected one of {IMPUTATION_STRATEGIES}")
        if strategy == 'constant' and fill_value is None:
            raise ValueError("The 'constant' strategy needs a fill_value")
        self.column = column
        self.strategy = strategy
        self.fill_value = fill_value
        self.fitted_value_ = None

    def fit(self, df: pd.DataFrame):
        _require_column(df, self.column)
        if self.strategy == 'drop':
            return self
        if self.strategy == 'constant':
            _check_fill_value(df[self.column], self.fill_value)
            self.fitted_value_ = self.fill_value
            return self

        values = df[self.column].dropna()
        if self.strategy in ('mean', 'median') and column_kind(df[self.column]) not in ('integer', 'real'):
            raise ValueError(f"Cannot take the {self.strategy} of non-numeric column '{self.column}'")
        if values.empty:
            logger.warning(f"Column {self.column} has no values; {self.strategy} fill skipped")
            self.fitted_value_ = None
        elif self.strategy == 'mean':
            self.fitted_value_ = float(values.mean())
        elif self.strategy == 'median':
            self.fitted_value_ = float(values.median())
        else:
            self.fitted_value_ = values.mode().iloc[0]
        return self

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if self.strategy == 'drop':
            return filter_by_presence(df, self.column)
        _require_column(df, self.column)
        if self.fitted_value_ is None:
            return df.copy()

        df = df.copy()
        column = df[self.column]
        value = self.fitted_value_
        _check_fill_value(column, value)
        if column_kind(column) == 'text':
            value = str(value)
        elif column_kind(column) == 'integer':
            if float(value) % 1 != 0:
                column = column.astype('Float64')
            else:
                value = int(value)
        missing = int(column.isna().sum())
        if missing:
            logger.info(f"Filling {missing} missing {self.column} values with {self.strategy} ({value})")
        df[self.column] = column.fillna(value)
        return df

    def fit_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        return self.fit(df).transform(df)


def handle_missing(df: pd.DataFrame, column, strategy='drop', fill_value=None) -> pd.DataFrame:
    """Apply one imputation strategy to ``column`` of ``df``."""
    return MissingValueHandler(column, strategy, fill_value).fit_transform(df)


def _as_column(values) -> pd.Series:
    if isinstance(values, (pd.Series, pd.Index, np.ndarray, ExtensionArray)):
        series = pd.Series(values).reset_index(drop=True)
    else:
        series = pd.Series(pd.array(list(values)))

    if ptypes.is_bool_dtype(series.dtype):
        return series.astype('boolean')
    if ptypes.is_integer_dtype(series.dtype):
        return series.astype('Int64')
    if ptypes.is_float_dtype(series.dtype):
        return series.astype('Float64')
    if ptypes.infer_dtype(series, skipna=True) in ('string', 'empty'):
        return series.astype('string')
    return series


def assemble_columns(columns) -> pd.DataFrame:
    """
    Build a table from ``(name, values)`` pairs, keeping their order.

    ``columns`` may also be a dict. All value sequences must have the
    same length.
    """
    pairs = list(columns.items()) if isinstance(columns, dict) else list(columns)
    data = {}
    length = None
    for name, values in pairs:
        if name in data:
            raise DuplicateColumnError(f"column '{name}' given more than once")
        series = _as_column(values)
        if length is None:
            length = len(series)
        elif len(series) != length:
            raise LengthMismatchError(
                f"column '{name}' has {len(series)} values, expected {length}"
            )
        data[name] = series
    return pd.DataFrame(data)


class FeatureEncoder:
    """
    Turns a typed table into the all-float matrix the classifier needs.

    Numeric and boolean columns pass through with missing cells as NaN.
    Text columns with at most ``max_categories`` distinct values are one-hot
    encoded; wider text columns (names, ticket numbers) are left out.
    """

    def __init__(self, exclude=(), max_categories=10):
        self.exclude = [c for c in exclude if c is not None]
        self.max_categories = max_categories
        self.numeric_columns = []
        self.categorical_columns = []
        self.skipped_columns = []
        self.feature_columns = None

    def fit(self, df: pd.DataFrame):
        self.numeric_columns, self.categorical_columns, self.skipped_columns = [], [], []
        for col in df.columns:
            if col in self.exclude:
                continue
            if column_kind(df[col]) in ('integer', 'real', 'boolean'):
                self.numeric_columns.append(col)
            elif df[col].nunique(dropna=True) <= self.max_categories:
                self.categorical_columns.append(col)
            else:
                self.skipped_columns.append(col)

        if self.skipped_columns:
            logger.warning(f"Skipping high-cardinality text columns: {self.skipped_columns}")
        self.feature_columns = self._encode(df).columns.tolist()
        logger.info(f"Encoded {len(self.feature_columns)} feature columns")
        return self

    def _encode(self, df):
        for col in self.numeric_columns + self.categorical_columns:
            _require_column(df, col)
        numeric = pd.DataFrame(
            {
                col: df[col].astype('Float64').to_numpy(dtype='float64', na_value=np.nan)
                for col in self.numeric_columns
            },
            index=df.index,
        )
        if not self.categorical_columns:
            return numeric
        dummies = pd.get_dummies(df[self.categorical_columns].astype(object), dtype='float64')
        return pd.concat([numeric, dummies], axis=1)

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if self.feature_columns is None:
            raise ValueError("FeatureEncoder must be fitted before transform")
        encoded = self._encode(df)

        # Categories unseen during fit are dropped, absent ones become 0
        missing_cols = set(self.feature_columns) - set(encoded.columns)
        for col in missing_cols:
            encoded[col] = 0.0
        return encoded[self.feature_columns]

    def fit_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        return self.fit(df).transform(df)
