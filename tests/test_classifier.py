import pytest

from id3tree.classifier import DecisionTreeClassifier
from id3tree.errors import ModelIncompatibleError
from id3tree.tree import Internal, Leaf


@pytest.fixture
def tree():
    return Internal(
        "outlook",
        {
            "sunny": Internal("humidity", {"high": Leaf("no"), "normal": Leaf("yes")}),
            "overcast": Leaf("yes"),
        },
    )


def test_leaf_only_tree():
    assert DecisionTreeClassifier(Leaf("yes")).classify({}) == "yes"


def test_walks_to_leaf(tree):
    classifier = DecisionTreeClassifier(tree)
    assert classifier.classify({"outlook": "sunny", "humidity": "normal"}) == "yes"
    assert classifier.classify({"outlook": "sunny", "humidity": "high"}) == "no"
    assert classifier({"outlook": "overcast"}) == "yes"


def test_trace_records_path(tree):
    trace = []
    DecisionTreeClassifier(tree).classify({"outlook": "sunny", "humidity": "high", "wind": "weak"}, trace)
    assert trace == [("outlook", "sunny"), ("humidity", "high"), "no"]


def test_explain(tree):
    assert DecisionTreeClassifier(tree).explain({"outlook": "overcast"}) == [("outlook", "overcast"), "yes"]


def test_unseen_value_is_incompatible(tree):
    with pytest.raises(ModelIncompatibleError) as excinfo:
        DecisionTreeClassifier(tree).classify({"outlook": "rain"})
    assert excinfo.value.attribute == "outlook"
    assert excinfo.value.value == "rain"


def test_missing_attribute_is_incompatible(tree):
    with pytest.raises(ModelIncompatibleError, match="no value for attribute 'humidity'"):
        DecisionTreeClassifier(tree).classify({"outlook": "sunny"})


def test_trace_untouched_on_failure(tree):
    trace = []
    with pytest.raises(ModelIncompatibleError):
        DecisionTreeClassifier(tree).classify({"outlook": "sunny", "humidity": "?"}, trace)
    assert trace == []


def test_trace_is_logged(tree, log_messages):
    DecisionTreeClassifier(tree).classify({"outlook": "overcast"})
    assert ("TRACE", "Path: outlook=overcast -> yes") in log_messages
