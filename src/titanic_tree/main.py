import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .config import LOG_LEVELS, PipelineConfig
from .data_loader import load_data
from .eda import run_eda
from .errors import NotFoundError, TableError, WriteError
from .features import IMPUTATION_STRATEGIES, MissingValueHandler, remove_column
from .model import (TreeModel, cross_validate, export_dot, plot_tree_figure, predict,
                    save_model, train_classifier)
from .model_evaluation import EvaluationReport, load_answers, score_predictions
from .submission import write_submission
from .utils import setup_logger

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    model: TreeModel
    predictions: pd.Series
    submission: Optional[pd.DataFrame]
    submission_written: bool
    training_rows: int
    cv_accuracy: Optional[float] = None
    evaluation: Optional[EvaluationReport] = None


def parse_fill_value(value):
    """Turn a fill value given as text into an int or float when it looks like one."""
    if value is None or not isinstance(value, str):
        return value
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    return value


def run_pipeline(config: PipelineConfig) -> PipelineResult:
    """
    Run load -> clean -> train -> predict -> export.

    Load, lookup and assembly errors propagate. A failed submission write
    is logged and reported through ``PipelineResult.submission_written``.
    """
    config.validate()
    logger.info("Starting survival prediction pipeline")

    # Step 1: Load data
    logger.info("Step 1: Loading data")
    train_df, test_df = load_data(config.train_path, config.test_path)

    if config.eda:
        run_eda(train_df, plots_dir=config.plots_dir, name='train')
        run_eda(test_df, plots_dir=config.plots_dir, name='test')

    # Step 2: Clean
    logger.info("Step 2: Cleaning data")
    for col in config.drop_columns:
        train_df = remove_column(train_df, col)
        test_df = remove_column(test_df, col)

    if config.missing_column:
        handler = MissingValueHandler(
            config.missing_column,
            strategy=config.missing_strategy,
            fill_value=parse_fill_value(config.fill_value),
        )
        train_df = handler.fit_transform(train_df)
        # Every test row needs a prediction, so rows are only dropped from training
        if config.missing_strategy != 'drop':
            test_df = handler.transform(test_df)
    logger.info(f"Training rows after cleaning: {len(train_df)}")

    # Step 3: Train
    logger.info("Step 3: Training decision tree")
    tree_params = dict(
        id_column=config.id_column,
        max_categories=config.max_categories,
        max_depth=config.max_depth,
        random_state=config.random_state,
    )
    cv_accuracy = None
    if config.cv_folds:
        cv_accuracy = cross_validate(train_df, config.target_column, folds=config.cv_folds, **tree_params)
    model = train_classifier(train_df, config.target_column, **tree_params)

    if config.model_path:
        save_model(model, config.model_path)
    if config.dot_path:
        export_dot(model, config.dot_path)
    if config.plot_path:
        plot_tree_figure(model, config.plot_path)

    # Step 4: Predict
    logger.info("Step 4: Making predictions on test data")
    if config.id_column not in test_df.columns:
        raise NotFoundError(config.id_column, test_df.columns)
    ids = test_df[config.id_column]
    predictions = predict(model, test_df)

    # Step 5: Export submission
    logger.info("Step 5: Writing submission")
    submission = None
    written = False
    try:
        submission = write_submission(
            ids, predictions, config.output_path,
            id_column=config.id_column, target_column=config.target_column,
        )
        written = True
    except WriteError as e:
        logger.error(f"Error writing submission: {e}", exc_info=True)

    evaluation = None
    if config.answers_path:
        logger.info("Step 6: Checking predictions against answers")
        answers = load_answers(config.answers_path, config.id_column, config.target_column)
        evaluation = score_predictions(ids, predictions, answers)

    logger.info("Pipeline completed" if written else "Pipeline completed without a submission file")
    return PipelineResult(
        model=model,
        predictions=predictions,
        submission=submission,
        submission_written=written,
        training_rows=len(train_df),
        cv_accuracy=cv_accuracy,
        evaluation=evaluation,
    )


def build_parser():
    parser = argparse.ArgumentParser(description='Titanic survival decision tree pipeline')

    parser.add_argument('--train', dest='train_path', type=str,
                        help='Path to training data')
    parser.add_argument('--test', dest='test_path', type=str,
                        help='Path to test data')
    parser.add_argument('--output', dest='output_path', type=str,
                        help='Path to save submission file')
    parser.add_argument('--model', dest='model_path', type=str,
                        help='Save the trained model to this path')
    parser.add_argument('--dot', dest='dot_path', type=str,
                        help='Write the tree in Graphviz DOT format')
    parser.add_argument('--plot', dest='plot_path', type=str,
                        help='Save a picture of the tree')
    parser.add_argument('--check', dest='answers_path', type=str,
                        help='File with the true labels to score the predictions against')
    parser.add_argument('--drop-column', dest='drop_columns', action='append',
                        help='Column to remove before training (repeatable)')
    parser.add_argument('--missing-column', type=str,
                        help='Column whose missing values are handled')
    parser.add_argument('--missing-strategy', choices=IMPUTATION_STRATEGIES,
                        help='How to handle missing values')
    parser.add_argument('--fill-value', type=str,
                        help="Fill value for the 'constant' strategy")
    parser.add_argument('--cv-folds', type=int,
                        help='Report k-fold cross-validation accuracy')
    parser.add_argument('--max-depth', type=int,
                        help='Maximum depth of the tree')
    parser.add_argument('--eda', action='store_true', default=None,
                        help='Log missing value summaries and save plots')
    parser.add_argument('--log-level', choices=LOG_LEVELS,
                        help='Logging level')
    parser.add_argument('--log-file', type=str,
                        help='Also log to this file')
    return parser


def main(argv=None, environ=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = PipelineConfig.from_env(environ)
    except ValueError as e:
        setup_logger('titanic_tree')
        logger.error(f"Invalid configuration: {e}")
        return 2
    for name, value in vars(args).items():
        if value is not None:
            setattr(config, name, value)

    setup_logger('titanic_tree', config.log_level.upper(), config.log_file)
    try:
        result = run_pipeline(config)
    except (TableError, ValueError) as e:
        logger.error(f"Pipeline failed: {e}")
        return 2

    if result.cv_accuracy is not None:
        print(f"Cross-validation accuracy: {result.cv_accuracy * 100:.2f}%")
    if result.evaluation is not None:
        print(result.evaluation.summary())
    return 0 if result.submission_written else 1


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
