"""ID3 decision trees with chi-square split stopping for nominal data."""

from loguru import logger

from .arff import read_arff
from .chisquare import (
    ChiSquare,
    ChiSquareCache,
    chi_square_tail_probability,
    critical_value,
    normal_cdf,
)
from .classifier import DecisionTreeClassifier
from .data import UNKNOWN, Attribute, Dataset
from .errors import (
    ArffFormatError,
    ID3Error,
    ModelIncompatibleError,
    NotFittedError,
    ValidationError,
)
from .evaluator import AccuracyEvaluator, EvaluationReport, accuracy
from .id3 import ID3
from .log import configure_logging
from .tree import Internal, Leaf, Node, render, to_dot

logger.disable("id3tree")

__version__ = "0.1.0"

__all__ = [
    "AccuracyEvaluator",
    "ArffFormatError",
    "Attribute",
    "ChiSquare",
    "ChiSquareCache",
    "Dataset",
    "DecisionTreeClassifier",
    "EvaluationReport",
    "ID3",
    "ID3Error",
    "Internal",
    "Leaf",
    "ModelIncompatibleError",
    "Node",
    "NotFittedError",
    "UNKNOWN",
    "ValidationError",
    "accuracy",
    "chi_square_tail_probability",
    "configure_logging",
    "critical_value",
    "normal_cdf",
    "read_arff",
    "render",
    "to_dot",
]
