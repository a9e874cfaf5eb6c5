"""Configuration settings for the survival pipeline."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .features import IMPUTATION_STRATEGIES

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


_OPTIONAL_FIELDS = ("model_path", "dot_path", "plot_path", "answers_path",
                    "missing_column", "fill_value", "log_file")


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _int_env(env, key) -> Optional[int]:
    value = env.get(key)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{key} must be an integer, got {value!r}") from None


@dataclass
class PipelineConfig:
    """
    Paths and settings for one training + submission run.

    Every field can be set through a ``TITANIC_*`` environment variable;
    command-line flags override both.

    Examples:
        export TITANIC_TRAIN_PATH="data/train.csv"
        export TITANIC_MISSING_STRATEGY="median"
    """

    # Input / output files
    train_path: str = "data/train.csv"
    test_path: str = "data/test.csv"
    output_path: str = "submissions/submission.csv"
    model_path: Optional[str] = None
    dot_path: Optional[str] = None
    plot_path: Optional[str] = None
    answers_path: Optional[str] = None

    # Columns
    id_column: str = "PassengerId"
    target_column: str = "Survived"
    drop_columns: List[str] = field(default_factory=lambda: ["Ticket"])

    # Missing values
    missing_column: Optional[str] = "Age"
    missing_strategy: str = "drop"
    fill_value: Optional[str] = None

    # Model
    max_depth: Optional[int] = None
    max_categories: int = 10
    random_state: int = 42
    cv_folds: int = 0

    # EDA / logging
    eda: bool = False
    plots_dir: str = "debug"
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls, environ=None, **kwargs) -> "PipelineConfig":
        """Create config from ``TITANIC_*`` environment variables."""
        env = os.environ if environ is None else environ
        config = cls(**kwargs)

        for name in ("train_path", "test_path", "output_path", "model_path", "dot_path",
                     "plot_path", "answers_path", "id_column", "target_column",
                     "missing_column", "missing_strategy", "fill_value", "plots_dir",
                     "log_level", "log_file"):
            value = env.get(f"TITANIC_{name.upper()}")
            if value is None:
                continue
            # Optional settings can be cleared with an empty value
            if value or name in _OPTIONAL_FIELDS:
                setattr(config, name, value or None)

        if env.get("TITANIC_DROP_COLUMNS") is not None:
            config.drop_columns = _split_list(env["TITANIC_DROP_COLUMNS"])
        for name in ("max_depth", "max_categories", "random_state", "cv_folds"):
            value = _int_env(env, f"TITANIC_{name.upper()}")
            if value is not None:
                setattr(config, name, value)
        if env.get("TITANIC_EDA"):
            config.eda = env["TITANIC_EDA"].lower() in ("1", "true", "yes", "on")

        return config

    def validate(self):
        """Validate configuration settings."""
        if self.missing_strategy not in IMPUTATION_STRATEGIES:
            raise ValueError(
                f"Invalid missing_strategy: {self.missing_strategy} (expected one of {IMPUTATION_STRATEGIES})"
            )
        if self.missing_strategy == "constant" and self.fill_value is None:
            raise ValueError("missing_strategy 'constant' needs a fill_value")
        if self.cv_folds == 1 or self.cv_folds < 0:
            raise ValueError("cv_folds must be 0 (disabled) or at least 2")
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        if self.max_categories < 1:
            raise ValueError("max_categories must be at least 1")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")
        return self

    def to_dict(self):
        return dict(self.__dict__)
