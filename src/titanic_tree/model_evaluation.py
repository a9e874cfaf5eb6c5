import logging
from dataclasses import dataclass

import pandas as pd
from sklearn.metrics import accuracy_score, classification_report, confusion_matrix

from .data_loader import load_table
from .errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class EvaluationReport:
    correct: int
    total: int
    accuracy: float
    confusion: list
    report: str

    def summary(self):
        return f"{self.correct}/{self.total} = {self.accuracy * 100:.2f}%"


def load_answers(answers_path, id_column='PassengerId', target_column='Survived') -> pd.Series:
    """Load the known labels from a file shaped like a submission, keyed by id."""
    answers = load_table(answers_path)
    for col in (id_column, target_column):
        if col not in answers.columns:
            raise NotFoundError(col, answers.columns)
    return answers.set_index(id_column)[target_column]


def score_predictions(ids, predictions, answers: pd.Series) -> EvaluationReport:
    """
    Compare predictions with the known answers for the same ids.

    Every id must be present in ``answers``.
    """
    ids = list(ids)
    predictions = list(predictions)
    if len(ids) != len(predictions):
        raise ValueError(f"{len(ids)} ids but {len(predictions)} predictions")
    if not ids:
        raise ValueError("Nothing to score")

    unknown = [i for i in ids if i not in answers.index]
    if unknown:
        raise NotFoundError(unknown[0], [])
    actual = [answers.loc[i] for i in ids]

    accuracy = accuracy_score(actual, predictions)
    correct = int(accuracy_score(actual, predictions, normalize=False))
    evaluation = EvaluationReport(
        correct=correct,
        total=len(ids),
        accuracy=float(accuracy),
        confusion=confusion_matrix(actual, predictions).tolist(),
        report=classification_report(actual, predictions, zero_division=0),
    )
    logger.info(f"Accuracy against answers: {evaluation.summary()}")
    logger.info(f"Classification report:\n{evaluation.report}")
    return evaluation
