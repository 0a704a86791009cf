from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from sentidash.core.logger import get_logger
from sentidash.core.types import LABELS, AnalysisResult, Sentiment
from sentidash.evaluation.ground_truth import GroundTruth

log = get_logger("evaluation")

ConfusionMatrix = dict[Sentiment, dict[Sentiment, int]]


@dataclass(frozen=True)
class ClassMetrics:
    precision: float
    recall: float
    f1: float


@dataclass(frozen=True)
class EvaluationReport:
    """Confusion matrix and per-class metrics over the evaluated results.

    ``matrix[actual][predicted]`` holds counts; ``evaluated`` is the number
    of results that had a ground-truth match.
    """

    matrix: ConfusionMatrix
    metrics: dict[Sentiment, ClassMetrics]
    accuracy: float
    evaluated: int


def empty_matrix() -> ConfusionMatrix:
    return {actual: {predicted: 0 for predicted in LABELS} for actual in LABELS}


def _ratio(num: float, den: float) -> float:
    return num / den if den > 0 else 0.0


def class_metrics(matrix: ConfusionMatrix, label: Sentiment) -> ClassMetrics:
    tp = matrix[label][label]
    fp = sum(matrix[other][label] for other in LABELS if other is not label)
    fn = sum(matrix[label][other] for other in LABELS if other is not label)

    precision = _ratio(tp, tp + fp)
    recall = _ratio(tp, tp + fn)
    f1 = _ratio(2 * precision * recall, precision + recall)
    return ClassMetrics(precision=precision, recall=recall, f1=f1)


def evaluate(
    results: Sequence[AnalysisResult],
    ground_truth: GroundTruth,
) -> Optional[EvaluationReport]:
    """Score results against the reference set.

    Only results whose text exactly matches a ground-truth text are counted.
    Returns None when nothing overlaps.
    """
    matrix = empty_matrix()
    evaluated = 0
    for result in results:
        actual = ground_truth.get(result.original_text)
        if actual is None:
            continue
        matrix[actual][result.sentiment] += 1
        evaluated += 1

    if evaluated == 0:
        log.debug("No analyzed text overlaps the ground truth; skipping evaluation")
        return None

    metrics = {label: class_metrics(matrix, label) for label in LABELS}
    correct = sum(matrix[label][label] for label in LABELS)
    accuracy = correct / evaluated

    log.info(f"Evaluated {evaluated} result(s): accuracy={accuracy:.3f}")
    return EvaluationReport(matrix=matrix, metrics=metrics, accuracy=accuracy, evaluated=evaluated)
