"""Classification of single examples with an induced decision tree."""

from __future__ import annotations

from collections.abc import Mapping

from loguru import logger

from .errors import ModelIncompatibleError
from .tree import Internal, Leaf, Node


class DecisionTreeClassifier:
    """
    Labels examples by walking a decision tree from its root.

    Args:
        tree (Node): The trained model.
    """

    def __init__(self, tree: Node):
        self.tree = tree

    def classify(self, example: Mapping[str, str], trace: list | None = None) -> str:
        """
        Determine the class label of an example.

        At each decision node the example's value for the tested attribute
        selects the branch. No guess is made for a value without a branch.

        Args:
            example: Mapping from attribute name to value.
            trace (list, optional): If given, the ``(attribute, value)`` pairs
                of the path are appended to it, followed by the label.

        Returns:
            str: The predicted class label.

        Raises:
            ModelIncompatibleError: If the example lacks a tested attribute or
                has a value the tree has no branch for.
        """
        path = []
        node = self.tree
        while isinstance(node, Internal):
            if node.attribute not in example:
                raise ModelIncompatibleError(node.attribute)
            value = example[node.attribute]
            child = node.children.get(value)
            if child is None:
                raise ModelIncompatibleError(node.attribute, value)
            path.append((node.attribute, value))
            node = child

        if not isinstance(node, Leaf):
            raise TypeError(f"Invalid model node: {node!r}")

        logger.trace("Path: {} -> {}", " / ".join(f"{a}={v}" for a, v in path) or "<root>", node.label)
        if trace is not None:
            trace.extend(path)
            trace.append(node.label)
        return node.label

    def explain(self, example: Mapping[str, str]) -> list:
        """Return the root to leaf path for ``example``: ``[(attribute, value), ..., label]``."""
        trace = []
        self.classify(example, trace)
        return trace

    __call__ = classify
