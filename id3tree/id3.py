"""
ID3 Decision Tree Algorithm with chi-square pre-pruning

This module implements the ID3 (Iterative Dichotomiser 3) decision tree
algorithm for nominal attributes. Before an attribute may be used for a
split it must pass a chi-square independence test against the class: if the
class distribution across the attribute's values does not deviate from the
parent distribution significantly (at the configured confidence), the
attribute is rejected. When no attribute survives the node becomes a leaf.

The algorithm works by:
1. Computing the class distribution of the current examples
2. Stopping on a pure node or when no attributes remain
3. Rejecting attributes that fail the chi-square split test
4. Selecting the surviving attribute with maximum information gain
   (or gain ratio)
5. Creating one branch per value of the selected attribute and recursing

Unknown values (``?``) are either a regular extra value of every attribute,
or ignored when scoring an attribute (and dropped when partitioning on it).
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from loguru import logger

from .chisquare import ChiSquare, default_engine
from .classifier import DecisionTreeClassifier
from .data import UNKNOWN, Attribute, Dataset
from .errors import NotFittedError, ValidationError
from .evaluator import accuracy
from .tree import Internal, Leaf, Node, plot_tree, render

VALID_CRITERIA = ("information_gain", "gain_ratio")


class ID3:
    """
    ID3 decision tree learner with chi-square split stopping.

    Key characteristics:
    - Nominal attributes only, multiway splits
    - Greedy algorithm (makes locally optimal choices)
    - Pre-pruning: a split needs statistically significant evidence

    Attributes:
        tree_ (Node): Root of the induced tree, set by :meth:`fit`.
        attributes_ (tuple[Attribute, ...]): Attributes available for splits,
            with UNKNOWN appended to each domain when treated as a value.
        class_attribute_ (Attribute): The class attribute of the training data.
    """

    def __init__(
        self,
        split_stopping_confidence: float = 0.0,
        treat_unknown_as_value: bool = False,
        criterion: str = "information_gain",
        chi_square: ChiSquare | None = None,
    ):
        """
        Initialize the learner.

        Args:
            split_stopping_confidence (float, optional): Confidence level in
                [0, 1] of the chi-square split test. 0 disables pruning; values
                closer to 1 prune more. Defaults to 0.0.
            treat_unknown_as_value (bool, optional): If True, UNKNOWN is an
                extra value of every attribute and gets its own branch. If
                False, examples with an unknown value are left out of that
                attribute's statistics. Defaults to False.
            criterion (str, optional): 'information_gain' (default) or
                'gain_ratio'.
            chi_square (ChiSquare, optional): Engine providing critical values.
                Defaults to the process-wide engine.
        """
        if criterion not in VALID_CRITERIA:
            raise ValueError(f"Invalid criterion '{criterion}'. Must be one of {list(VALID_CRITERIA)}")
        if not 0.0 <= split_stopping_confidence <= 1.0:
            raise ValueError(f"split_stopping_confidence must be in [0, 1], got {split_stopping_confidence}")

        self.split_stopping_confidence = float(split_stopping_confidence)
        self.treat_unknown_as_value = bool(treat_unknown_as_value)
        self.criterion = criterion
        self.chi_square = chi_square if chi_square is not None else default_engine()

        self.tree_: Node | None = None
        self.attributes_: tuple[Attribute, ...] = ()
        self.class_attribute_: Attribute | None = None
        self.classes_: tuple[str, ...] = ()

    @property
    def use_gain_ratio(self) -> bool:
        return self.criterion == "gain_ratio"

    # ---------- impurity measures ----------

    def class_distribution(self, y: np.ndarray) -> np.ndarray:
        """Count of each class value, in class domain order (zero counts included)."""
        return np.array([np.count_nonzero(y == c) for c in self.classes_], dtype=float)

    @staticmethod
    def entropy(counts: np.ndarray) -> float:
        """
        Shannon entropy (natural log) of a class count vector.

        H(S) = -∑(p_i * ln(p_i)), with 0 * ln(0) taken as 0. An empty
        distribution has zero entropy.
        """
        total = counts.sum()
        if total == 0:
            return 0.0
        p = counts[counts > 0] / total
        return float(-(p * np.log(p)).sum())

    def group_by_value(self, X: np.ndarray, y: np.ndarray, feature: int) -> list[tuple[str, np.ndarray]]:
        """
        Class count vectors of the example groups sharing a value of ``feature``.

        Groups come in domain order and empty groups are omitted. The unknown
        group is dropped unless unknown is treated as a value.
        """
        column = X[:, feature]
        groups = []
        for value in self._domain(feature):
            if value == UNKNOWN and not self.treat_unknown_as_value:
                continue
            mask = column == value
            if mask.any():
                groups.append((value, self.class_distribution(y[mask])))
        return groups

    @staticmethod
    def chi_square_statistic(groups: Sequence[np.ndarray], class_counts: np.ndarray) -> float:
        """
        Chi-square statistic of the value × class contingency table.

        Expected counts come from the overall class proportions:
        expected = |group| * count(c) / |examples|. Cells whose expected count
        is 0 (a class absent from the examples) contribute nothing.

        Args:
            groups: Class count vector of each value group.
            class_counts: Class counts over all examples at the node.

        Returns:
            float: ∑ (observed - expected)² / expected
        """
        total = class_counts.sum()
        if total == 0 or not len(groups):
            return 0.0
        observed = np.vstack(groups)
        expected = np.outer(observed.sum(axis=1), class_counts / total)
        nonzero = expected > 0
        return float((((observed - expected) ** 2)[nonzero] / expected[nonzero]).sum())

    def information_gain(self, groups: Sequence[np.ndarray], class_counts: np.ndarray) -> float:
        """
        IG(S, A) = H(S) - ∑((|S_v| / |S|) * H(S_v))

        S is the set of examples covered by ``class_counts``; callers pass the
        counts of the examples whose value for A is known.
        """
        n = class_counts.sum()
        weighted = sum(g.sum() / n * self.entropy(g) for g in groups)
        return self.entropy(class_counts) - weighted

    @staticmethod
    def split_information(groups: Sequence[np.ndarray], n: float) -> float:
        """
        SplitInfo(S, A) = -∑((|S_v| / |S|) * ln(|S_v| / |S|))

        Zero when all examples fall in a single group.
        """
        sizes = np.array([g.sum() for g in groups], dtype=float)
        p = sizes[sizes > 0] / n
        return float(-(p * np.log(p)).sum())

    def gain_ratio(self, groups: Sequence[np.ndarray], class_counts: np.ndarray) -> float | None:
        """
        GainRatio(S, A) = IG(S, A) / SplitInfo(S, A)

        Returns None when the split information is 0: the attribute does not
        separate the examples and cannot be scored.
        """
        split_info = self.split_information(groups, class_counts.sum())
        if split_info <= 0.0:
            return None
        return self.information_gain(groups, class_counts) / split_info

    def calculate_split_criterion(self, groups: Sequence[np.ndarray], class_counts: np.ndarray) -> float | None:
        """
        Calculate the split criterion based on the selected method.

        Args:
            groups: Class count vector of each value group.
            class_counts: Class counts over the examples the groups cover.

        Returns:
            float | None: Information gain or gain ratio. None when the gain
            ratio is undefined.
        """
        if self.use_gain_ratio:
            return self.gain_ratio(groups, class_counts)
        return self.information_gain(groups, class_counts)

    def majority_class(self, counts: np.ndarray) -> str:
        """
        Most common class. Ties go to the class declared first in the class
        domain (np.argmax returns the first maximum).
        """
        return self.classes_[int(np.argmax(counts))]

    # ---------- attribute selection ----------

    def passes_split_test(self, groups, class_counts, feature: int) -> tuple[bool, float, float]:
        """
        Chi-square split test for one attribute.

        Returns:
            tuple: (passed, statistic, critical value)
        """
        statistic = self.chi_square_statistic([g for _, g in groups], class_counts)
        df = len(self._domain(feature)) - 1
        critical = self.chi_square.critical_value(1.0 - self.split_stopping_confidence, df)
        return statistic >= critical, statistic, critical

    def select_attribute(self, X: np.ndarray, y: np.ndarray, features: Sequence[int]):
        """
        Pick the attribute to split on.

        Candidates are visited in declaration order; an attribute must pass the
        chi-square split test, then the one with the strictly highest criterion
        value wins (ties keep the first one). Unless unknown is treated as a
        value, each attribute is scored on the examples where it is known, and
        an attribute known for none of them is not a candidate.

        Returns:
            int | None: Column of the selected attribute, or None if no
            attribute qualifies.
        """
        best_feature = None
        best_score = -np.inf
        for f in features:
            name = self.attributes_[f].name
            groups = self.group_by_value(X, y, f)
            if not groups:
                logger.trace("'{}' has no known values, skipped", name)
                continue
            known_counts = np.sum([g for _, g in groups], axis=0)

            passed, statistic, critical = self.passes_split_test(groups, known_counts, f)
            if not passed:
                logger.trace("Chi-square test rejected '{}': data={:.4f} critical={:.4f}", name, statistic, critical)
                continue

            score = self.calculate_split_criterion([g for _, g in groups], known_counts)
            if score is None:
                logger.trace("'{}' has zero split information, skipped", name)
                continue
            logger.trace("'{}': chi2={:.4f} critical={:.4f} {}={:.4f}", name, statistic, critical, self.criterion, score)

            if score > best_score:
                best_score = score
                best_feature = f

        if best_feature is not None:
            logger.debug("Selected attribute '{}' ({}={:.4f})", self.attributes_[best_feature].name, self.criterion, best_score)
        else:
            logger.debug("No relevant attribute found")
        return best_feature

    # ---------- training ----------

    def build_tree(self, X: np.ndarray, y: np.ndarray, features: Sequence[int]) -> Node:
        """
        Recursively build the tree for the examples (X, y).

        Args:
            X (numpy.ndarray): Attribute values of the current examples
            y (numpy.ndarray): Class labels of the current examples
            features (list): Columns still available for splitting

        Returns:
            Node: A Leaf or an Internal node with one child per domain value.
        """
        class_counts = self.class_distribution(y)

        # === STOPPING CRITERIA ===

        # Stop if all samples have the same class (pure node)
        present = np.flatnonzero(class_counts)
        if len(present) == 1:
            return Leaf(self.classes_[present[0]])

        most_common = self.majority_class(class_counts)

        # Stop if no more attributes are available for splitting
        if len(features) == 0:
            return Leaf(most_common)

        # === ATTRIBUTE SELECTION ===

        best = self.select_attribute(X, y, features)
        if best is None:
            # nothing passes the split-stopping test
            return Leaf(most_common)

        # === TREE NODE CREATION ===

        remaining = [f for f in features if f != best]
        column = X[:, best]
        children = {}
        for value in self._domain(best):
            mask = column == value
            if not mask.any():
                children[value] = Leaf(most_common)
            else:
                children[value] = self.build_tree(X[mask], y[mask], remaining)

        return Internal(self.attributes_[best].name, children)

    def _domain(self, feature: int) -> tuple[str, ...]:
        return self.attributes_[feature].values

    def fit(self, data: Dataset) -> "ID3":
        """
        Induce a decision tree from the training dataset.

        Args:
            data (Dataset): Training data with a designated class attribute.

        Returns:
            self: Returns the fitted learner.

        Raises:
            ValidationError: If the dataset has no usable class attribute, is
                empty, or has examples with an unknown class.
        """
        if not isinstance(data, Dataset):
            raise ValidationError(f"Expected a Dataset, got {type(data).__name__}")
        data.validate(training=True)

        self.class_attribute_ = data.class_attribute
        self.classes_ = self.class_attribute_.values
        attributes = data.feature_attributes
        X, y = data.to_arrays(attributes)
        if self.treat_unknown_as_value:
            attributes = tuple(a.with_unknown() for a in attributes)
        self.attributes_ = attributes

        logger.info(
            "Learning from {} examples, {} attributes (confidence={}, criterion={}, unknown_as_value={})",
            len(y), len(attributes), self.split_stopping_confidence, self.criterion, self.treat_unknown_as_value,
        )
        self.tree_ = self.build_tree(X, y, list(range(len(attributes))))
        return self

    # ---------- inference ----------

    def _check_fitted(self) -> Node:
        if self.tree_ is None:
            raise NotFittedError("Learner not fitted, call `fit` first.")
        return self.tree_

    def predict(self, examples) -> np.ndarray:
        """
        Predict class labels for several examples.

        Args:
            examples: A Dataset or an iterable of attribute-name → value mappings.

        Returns:
            numpy.ndarray: Predicted class labels.

        Raises:
            ModelIncompatibleError: If an example cannot be routed through the tree.
        """
        classifier = DecisionTreeClassifier(self._check_fitted())
        return np.array([classifier.classify(example) for example in examples], dtype=object)

    def score(self, data: Dataset) -> float:
        """Accuracy of the fitted tree on ``data``."""
        return accuracy(self._check_fitted(), data)

    def print_tree(self, file=None) -> None:
        """Print the text rendering of the tree."""
        print(render(self._check_fitted()), file=file)

    def plot_tree(self, filename: str = "decision_tree", view: bool = False):
        """Render the tree with Graphviz. See :func:`id3tree.tree.plot_tree`."""
        return plot_tree(self._check_fitted(), filename, view)
