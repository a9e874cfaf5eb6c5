# ===== model.py =====
import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import joblib
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score
from sklearn.model_selection import StratifiedKFold, cross_val_score
from sklearn.tree import DecisionTreeClassifier, export_graphviz, plot_tree

from .data_loader import column_kind
from .errors import LoadError, NotFoundError, WriteError
from .features import FeatureEncoder
from .utils import ensure_parent_dir

logger = logging.getLogger(__name__)


@dataclass
class TreeModel:
    """A fitted decision tree plus everything needed to encode new tables."""

    estimator: DecisionTreeClassifier
    encoder: FeatureEncoder
    target_column: str
    id_column: Optional[str] = None
    label_kind: str = 'integer'
    training_rows: int = 0
    metadata: dict = field(default_factory=dict)

    @property
    def feature_columns(self):
        return self.encoder.feature_columns


def _target_values(y: pd.Series) -> np.ndarray:
    if column_kind(y) in ('integer', 'boolean', 'real'):
        return y.astype('int64').to_numpy()
    return y.astype(str).to_numpy(dtype=object)


def _prepare(df, target_column, id_column, max_categories):
    if target_column not in df.columns:
        raise NotFoundError(target_column, df.columns)
    y = df[target_column]
    if y.isna().any():
        raise ValueError(f"Target column '{target_column}' has {int(y.isna().sum())} missing values")

    encoder = FeatureEncoder(
        exclude=[target_column, id_column if id_column in df.columns else None],
        max_categories=max_categories,
    )
    X = encoder.fit_transform(df)
    if X.shape[1] == 0:
        raise ValueError("No usable feature columns left to train on")
    return X, _target_values(y), encoder


def train_classifier(df: pd.DataFrame, target_column, id_column='PassengerId',
                     max_categories=10, max_depth=None, random_state=42, **tree_params) -> TreeModel:
    """
    Fit a decision tree that predicts ``target_column`` from the other columns.

    Parameters:
    -----------
    df : pd.DataFrame
        Cleaned training table
    target_column : str
        Column holding the labels
    id_column : str
        Row identifier, never used as a feature
    max_categories : int
        Widest text column that still gets one-hot encoded
    max_depth, random_state, **tree_params
        Passed through to DecisionTreeClassifier
    """
    logger.info(f"Training decision tree on {len(df)} rows to predict {target_column}")
    X, y, encoder = _prepare(df, target_column, id_column, max_categories)

    clf = DecisionTreeClassifier(max_depth=max_depth, random_state=random_state, **tree_params)
    clf.fit(X, y)

    train_accuracy = accuracy_score(y, clf.predict(X))
    logger.info(
        f"Tree trained: depth={clf.get_depth()}, leaves={clf.get_n_leaves()}, "
        f"training accuracy={train_accuracy:.4f}"
    )

    return TreeModel(
        estimator=clf,
        encoder=encoder,
        target_column=target_column,
        id_column=id_column,
        label_kind='integer' if y.dtype.kind == 'i' else 'text',
        training_rows=len(df),
        metadata={'train_accuracy': float(train_accuracy)},
    )


def predict(model: TreeModel, df: pd.DataFrame) -> pd.Series:
    """Predicted labels for every row of ``df``, in row order."""
    X = model.encoder.transform(df)
    preds = model.estimator.predict(X)
    dtype = 'Int64' if model.label_kind == 'integer' else 'string'
    logger.info(f"Predicted {len(preds)} rows")
    return pd.Series(preds, index=df.index, name=model.target_column).astype(dtype)


def cross_validate(df: pd.DataFrame, target_column, folds=5, id_column='PassengerId',
                   max_categories=10, max_depth=None, random_state=42, **tree_params) -> float:
    """Mean accuracy of the tree over stratified k-fold splits of ``df``."""
    if folds < 2:
        raise ValueError(f"Cross-validation needs at least 2 folds, got {folds}")
    X, y, _ = _prepare(df, target_column, id_column, max_categories)

    cv = StratifiedKFold(n_splits=folds, shuffle=True, random_state=random_state)
    clf = DecisionTreeClassifier(max_depth=max_depth, random_state=random_state, **tree_params)
    scores = cross_val_score(clf, X, y, cv=cv, scoring='accuracy')
    logger.info(f"Cross-validation accuracy over {folds} folds: {scores.mean():.4f} (+/- {scores.std():.4f})")
    return float(scores.mean())


def save_model(model: TreeModel, model_path):
    try:
        ensure_parent_dir(model_path)
        joblib.dump(model, model_path)
    except OSError as e:
        raise WriteError(model_path, e.strerror or str(e)) from e
    logger.info(f"Model saved to {model_path}")


def load_model(model_path) -> TreeModel:
    if not os.path.exists(model_path):
        raise LoadError(f"{model_path} does not exist")
    logger.info(f"Loading model from {model_path}")
    model = joblib.load(model_path)
    if not isinstance(model, TreeModel):
        raise LoadError(f"{model_path} does not hold a trained tree model")
    return model


def export_dot(model: TreeModel, dot_path):
    """Write the tree in Graphviz DOT format."""
    dot = export_graphviz(
        model.estimator,
        out_file=None,
        feature_names=model.feature_columns,
        class_names=[str(c) for c in model.estimator.classes_],
        filled=True,
        rounded=True,
    )
    try:
        ensure_parent_dir(dot_path)
        with open(dot_path, 'w', encoding='utf-8') as f:
            f.write(dot)
    except OSError as e:
        raise WriteError(dot_path, e.strerror or str(e)) from e
    logger.info(f"Tree written to {dot_path}")
    return dot


def plot_tree_figure(model: TreeModel, plot_path, max_depth=3):
    """Save a picture of the top ``max_depth`` levels of the tree."""
    ensure_parent_dir(plot_path)
    fig = plt.figure(figsize=(20, 10))
    plot_tree(
        model.estimator,
        max_depth=max_depth,
        feature_names=model.feature_columns,
        class_names=[str(c) for c in model.estimator.classes_],
        filled=True,
        fontsize=8,
    )
    plt.title(f'Decision tree for {model.target_column}')
    plt.tight_layout()
    plt.savefig(plot_path)
    plt.close(fig)
    logger.info(f"Tree plot saved to {plot_path}")
