"""Accuracy of a decision tree on a labeled dataset."""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from .classifier import DecisionTreeClassifier
from .data import Dataset
from .errors import ModelIncompatibleError, ValidationError
from .log import progress
from .tree import Node

PROGRESS_EVERY = 1000


@dataclass(frozen=True)
class EvaluationReport:
    """Outcome of an evaluation run."""

    correct: int
    total: int
    skipped: int = 0

    @property
    def accuracy(self) -> float:
        return self.correct / self.total


class AccuracyEvaluator:
    """
    Measures how many examples a classifier labels correctly.

    Args:
        classifier (DecisionTreeClassifier): Classifier to evaluate.
        skip_incompatible (bool, optional): If True, examples the tree cannot
            route are logged as warnings and counted as misclassified instead
            of aborting the run. Defaults to False.
    """

    def __init__(self, classifier: DecisionTreeClassifier, skip_incompatible: bool = False):
        self.classifier = classifier
        self.skip_incompatible = skip_incompatible

    def evaluate(self, data: Dataset) -> EvaluationReport:
        """
        Classify every example of ``data`` and compare with its class value.

        Raises:
            ValidationError: If ``data`` has no class attribute or no examples.
            ModelIncompatibleError: If an example cannot be classified and
                ``skip_incompatible`` is False.
        """
        data.validate()
        if len(data) == 0:
            raise ValidationError("Cannot compute accuracy on an empty dataset")

        class_name = data.class_attribute.name
        progress("Running accuracy evaluator on {} examples", len(data))

        correct = skipped = 0
        for position, example in enumerate(data, start=1):
            try:
                predicted = self.classifier.classify(example)
            except ModelIncompatibleError as e:
                if not self.skip_incompatible:
                    raise
                logger.warning("Skipping example {}: {}", position, e)
                skipped += 1
                continue

            if predicted == example[class_name]:
                correct += 1
            if position % PROGRESS_EVERY == 0:
                progress("Evaluated {} / {} examples", position, len(data))

        report = EvaluationReport(correct=correct, total=len(data), skipped=skipped)
        progress("Done: accuracy={:.4f}", report.accuracy)
        return report


def accuracy(tree: Node, data: Dataset) -> float:
    """
    Fraction of examples in ``data`` whose class the tree predicts correctly.

    Raises:
        ValidationError: If ``data`` is empty or lacks a class attribute.
        ModelIncompatibleError: If an example cannot be classified.
    """
    return AccuracyEvaluator(DecisionTreeClassifier(tree)).evaluate(data).accuracy
