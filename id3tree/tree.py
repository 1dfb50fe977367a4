"""
Decision tree model and its renderings.

A tree is made of two node kinds:

- :class:`Leaf` holds a class label.
- :class:`Internal` tests one attribute and owns one child per value of
  that attribute's domain.

Nodes are immutable once built; :class:`Internal` exposes its children as a
read-only mapping whose iteration order is the attribute's domain order, so
every rendering is deterministic.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Union

from loguru import logger


@dataclass(frozen=True)
class Leaf:
    """Terminal node predicting ``label``."""

    label: str

    @property
    def is_leaf(self) -> bool:
        return True


@dataclass(frozen=True)
class Internal:
    """Decision node splitting on ``attribute``."""

    attribute: str
    children: Mapping[str, "Node"] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "children", MappingProxyType(dict(self.children)))

    @property
    def is_leaf(self) -> bool:
        return False

    @property
    def label(self) -> str:
        return self.attribute


Node = Union[Leaf, Internal]


def iter_nodes(tree: Node) -> Iterator[Node]:
    """Yield every node, parents before children, branches in domain order."""
    yield tree
    if isinstance(tree, Internal):
        for child in tree.children.values():
            yield from iter_nodes(child)


def node_count(tree: Node) -> int:
    return sum(1 for _ in iter_nodes(tree))


def leaf_count(tree: Node) -> int:
    return sum(1 for node in iter_nodes(tree) if isinstance(node, Leaf))


def depth(tree: Node) -> int:
    """Number of tests on the longest root-to-leaf path (0 for a single leaf)."""
    if isinstance(tree, Leaf):
        return 0
    return 1 + max((depth(child) for child in tree.children.values()), default=0)


def attributes_used(tree: Node) -> set[str]:
    return {node.attribute for node in iter_nodes(tree) if isinstance(node, Internal)}


def render(tree: Node, indent: str = "") -> str:
    """
    Text representation of the tree, one line per node.

    Each branch is prefixed with its value in ``{value}`` notation and each
    level adds four spaces of indentation::

        Weather
         |{Sunny} Play
         |{Rainy} Stay
    """
    lines = [tree.label]
    if isinstance(tree, Internal):
        for value, child in tree.children.items():
            subtree = render(child, indent + "    ")
            lines.append(f"{indent} |{{{value}}} {subtree}")
    return "\n".join(lines)


def to_dot(tree: Node, title: str = "ID3 Decision Tree") -> str:
    """
    Generate DOT source code for the tree.

    Returns:
        str: DOT format string; leaves are green boxes, tests blue ellipses.
    """
    lines = [f'digraph "{title}" {{', "rankdir=TB;"]

    def add_node_to_dot(node, node_id):
        if isinstance(node, Leaf):
            lines.append(f'{node_id} [label="{_escape(node.label)}" shape=box style=filled fillcolor=lightgreen];')
            return
        lines.append(f'{node_id} [label="{_escape(node.attribute)}" shape=ellipse style=filled fillcolor=lightblue];')
        for i, (value, child) in enumerate(node.children.items()):
            child_id = f"{node_id}_{i}"
            lines.append(f'{node_id} -> {child_id} [label="{_escape(value)}"];')
            add_node_to_dot(child, child_id)

    add_node_to_dot(tree, "root")
    lines.append("}")
    return "\n".join(lines)


def _escape(text: str) -> str:
    return str(text).replace("\\", "\\\\").replace('"', '\\"')


def build_digraph(tree: Node, title: str = "ID3 Decision Tree"):
    """
    Build a ``graphviz.Digraph`` for the tree.

    Requires the optional ``graphviz`` package (``pip install id3tree[plot]``).
    """
    from graphviz import Digraph

    graph = Digraph(comment=title)
    graph.attr(rankdir="TB")
    _add_nodes_edges(tree, graph)
    return graph


def _add_nodes_edges(node, graph, parent_id=None, edge_label=None, node_id="root"):
    if isinstance(node, Leaf):
        graph.node(node_id, node.label, shape="box", style="filled", fillcolor="lightgreen")
    else:
        graph.node(node_id, node.attribute, shape="ellipse", style="filled", fillcolor="lightblue")
        for i, (value, child) in enumerate(node.children.items()):
            _add_nodes_edges(child, graph, node_id, str(value), f"{node_id}_{i}")

    # skip for root
    if parent_id is not None:
        graph.edge(parent_id, node_id, label=edge_label)


def plot_tree(tree: Node, filename: str = "decision_tree", view: bool = False):
    """
    Render the tree to ``<filename>.png`` with Graphviz.

    Needs both the ``graphviz`` Python package and the system ``dot`` binary.

    Returns:
        Digraph object if successful, None if Graphviz is not available.
    """
    try:
        graph = build_digraph(tree)
    except ImportError:
        logger.error("Please install graphviz: pip install graphviz")
        return None

    graph.render(filename, format="png", cleanup=True, view=view)
    logger.info("Tree saved as '{}.png'", filename)
    return graph
