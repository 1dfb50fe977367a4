"""
Tabular data model: nominal attributes, examples and the dataset holding them.

A :class:`Dataset` is an ordered schema of :class:`Attribute` objects, one of
which is designated as the class attribute, plus an ordered list of examples.
Each example maps every attribute name to a value of that attribute's domain
or to :data:`UNKNOWN`. Values are validated when an example is appended, so a
dataset that exists is always consistent with its schema.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass

import numpy as np

from .errors import ValidationError

UNKNOWN = "?"
"""Sentinel for a missing value (the ARFF missing-value marker)."""

Example = Mapping[str, str]


@dataclass(frozen=True)
class Attribute:
    """
    A nominal attribute.

    Attributes:
        name (str): Attribute name, unique within a schema.
        values (tuple[str, ...]): Ordered domain of permitted values.
    """

    name: str
    values: tuple[str, ...]

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValidationError("Attribute name must be a non-empty string")
        values = tuple(self.values)
        if not values:
            raise ValidationError(f"Attribute '{self.name}' has an empty domain")
        if len(set(values)) != len(values):
            raise ValidationError(f"Attribute '{self.name}' declares duplicate values: {list(values)}")
        object.__setattr__(self, "values", values)

    def __contains__(self, value):
        return value in self.values

    def __len__(self):
        return len(self.values)

    def with_unknown(self) -> "Attribute":
        """Return a copy whose domain also contains UNKNOWN as a regular value."""
        if UNKNOWN in self.values:
            return self
        return Attribute(self.name, self.values + (UNKNOWN,))

    def __str__(self):
        values = ",".join(f"'{v}'" for v in self.values)
        return f"'{self.name}' {{{values}}}"


class Dataset:
    """
    Schema plus examples.

    Args:
        attributes (Iterable[Attribute], optional): Initial schema.
        class_attribute (str, optional): Name of the attribute holding the label.
    """

    def __init__(self, attributes: Iterable[Attribute] = (), class_attribute: str | None = None):
        self._attributes: list[Attribute] = []
        self._index: dict[str, int] = {}
        self._examples: list[dict[str, str]] = []
        self.class_attribute_name: str | None = None
        for attribute in attributes:
            self._append_attribute(attribute)
        if class_attribute is not None:
            self.set_class_attribute(class_attribute)

    # ---------- schema ----------

    def add_attribute(self, name: str, values: Sequence[str]) -> Attribute:
        """Declare a new attribute at the end of the schema."""
        return self._append_attribute(Attribute(name, tuple(values)))

    def _append_attribute(self, attribute: Attribute) -> Attribute:
        if self._examples:
            raise ValidationError("Attributes must be declared before examples are added")
        if attribute.name in self._index:
            raise ValidationError(f"Duplicate attribute '{attribute.name}'")
        self._index[attribute.name] = len(self._attributes)
        self._attributes.append(attribute)
        return attribute

    def set_class_attribute(self, name: str) -> None:
        if not name or not name.strip():
            raise ValidationError("Class attribute name must be a non-empty string")
        self.class_attribute_name = name

    @property
    def attributes(self) -> tuple[Attribute, ...]:
        return tuple(self._attributes)

    def attribute(self, name: str) -> Attribute:
        try:
            return self._attributes[self._index[name]]
        except KeyError:
            raise ValidationError(f"Unknown attribute '{name}'") from None

    @property
    def class_attribute(self) -> Attribute:
        if self.class_attribute_name is None:
            raise ValidationError("No class attribute has been designated")
        if self.class_attribute_name not in self._index:
            raise ValidationError(f"Class attribute '{self.class_attribute_name}' is not declared in the schema")
        return self.attribute(self.class_attribute_name)

    @property
    def feature_attributes(self) -> tuple[Attribute, ...]:
        """Every attribute except the class attribute, in declaration order."""
        class_name = self.class_attribute.name
        return tuple(a for a in self._attributes if a.name != class_name)

    @property
    def class_values(self) -> tuple[str, ...]:
        return self.class_attribute.values

    # ---------- examples ----------

    def add_example(self, values: Sequence[str] | Mapping[str, str]) -> dict[str, str]:
        """
        Append one example.

        Args:
            values: Either one value per attribute in schema order, or a
                mapping from attribute name to value.

        Returns:
            dict: The stored example.

        Raises:
            ValidationError: On wrong arity, missing attributes, or a value
                outside the attribute's domain that is not UNKNOWN.
        """
        if not self._attributes:
            raise ValidationError("Cannot add examples to a dataset without attributes")

        if isinstance(values, Mapping):
            missing = [a.name for a in self._attributes if a.name not in values]
            if missing:
                raise ValidationError(f"Example is missing attributes {missing}")
            extra = [k for k in values if k not in self._index]
            if extra:
                raise ValidationError(f"Example references undeclared attributes {extra}")
            row = [values[a.name] for a in self._attributes]
        else:
            row = list(values)
            if len(row) != len(self._attributes):
                raise ValidationError(
                    f"Example has {len(row)} values but the schema declares {len(self._attributes)} attributes"
                )

        example = {}
        for attribute, value in zip(self._attributes, row):
            if value != UNKNOWN and value not in attribute:
                raise ValidationError(
                    f"Invalid value '{value}' for attribute '{attribute.name}' (allowed: {list(attribute.values)})"
                )
            example[attribute.name] = value
        self._examples.append(example)
        return example

    def extend(self, rows: Iterable[Sequence[str] | Mapping[str, str]]) -> None:
        for row in rows:
            self.add_example(row)

    @property
    def examples(self) -> tuple[dict[str, str], ...]:
        return tuple(self._examples)

    def __len__(self):
        return len(self._examples)

    def __iter__(self) -> Iterator[dict[str, str]]:
        return iter(self._examples)

    # ---------- checks & conversions ----------

    def validate(self, training: bool = False) -> None:
        """
        Check that the dataset is usable.

        Always requires a declared class attribute. With ``training=True`` the
        dataset must also be non-empty and no example may have an unknown
        class label.
        """
        class_attribute = self.class_attribute
        if not training:
            return
        if not self._examples:
            raise ValidationError("Cannot learn from an empty dataset")
        for position, example in enumerate(self._examples):
            if example[class_attribute.name] == UNKNOWN:
                raise ValidationError(
                    f"Example {position} has an unknown value for class attribute '{class_attribute.name}'"
                )

    def to_arrays(self, attributes: Sequence[Attribute] | None = None) -> tuple[np.ndarray, np.ndarray]:
        """
        Return the examples as an object matrix and a class vector.

        Args:
            attributes: Columns to extract. Defaults to the feature attributes.

        Returns:
            tuple: ``(X, y)`` with ``X`` of shape (n_examples, n_attributes).
        """
        if attributes is None:
            attributes = self.feature_attributes
        class_name = self.class_attribute.name
        X = np.empty((len(self._examples), len(attributes)), dtype=object)
        for i, example in enumerate(self._examples):
            for j, attribute in enumerate(attributes):
                X[i, j] = example[attribute.name]
        y = np.array([example[class_name] for example in self._examples], dtype=object)
        return X, y

    @classmethod
    def from_rows(
        cls,
        names: Sequence[str],
        rows: Iterable[Sequence[str]],
        class_attribute: str,
        domains: Mapping[str, Sequence[str]] | None = None,
    ) -> "Dataset":
        """
        Build a dataset from rows of values.

        Domains not given in ``domains`` are inferred from the rows in
        first-seen order (UNKNOWN is never part of an inferred domain).
        """
        rows = [list(row) for row in rows]
        domains = dict(domains or {})
        for j, name in enumerate(names):
            if name in domains:
                continue
            seen = []
            for row in rows:
                if row[j] != UNKNOWN and row[j] not in seen:
                    seen.append(row[j])
            domains[name] = seen
        dataset = cls()
        for name in names:
            dataset.add_attribute(name, domains[name])
        dataset.set_class_attribute(class_attribute)
        dataset.extend(rows)
        return dataset

    def __str__(self):
        lines = ["@attributes"]
        lines.extend(str(a) for a in self._attributes)
        lines.append("")
        lines.append("@data")
        lines.extend(",".join(example[a.name] for a in self._attributes) for example in self._examples)
        return "\n".join(lines)
