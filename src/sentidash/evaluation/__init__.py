from __future__ import annotations

from .ground_truth import GroundTruth, default_ground_truth, load_ground_truth
from .metrics import ClassMetrics, EvaluationReport, empty_matrix, evaluate

__all__ = [
    "ClassMetrics",
    "EvaluationReport",
    "GroundTruth",
    "default_ground_truth",
    "empty_matrix",
    "evaluate",
    "load_ground_truth",
]
