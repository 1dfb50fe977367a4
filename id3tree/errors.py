"""Exceptions raised by id3tree."""


class ID3Error(Exception):
    """Base class for all id3tree errors."""


class ValidationError(ID3Error, ValueError):
    """Raised when a dataset is malformed (missing class attribute, value outside its domain, ...)."""


class ArffFormatError(ValidationError):
    """Raised when an ARFF source cannot be parsed."""

    def __init__(self, message, line_number=None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class ModelIncompatibleError(ID3Error):
    """
    Raised when an example cannot be routed through a tree.

    Either the example lacks the attribute tested at a node, or its value has
    no branch (value unseen during training, or schema mismatch).
    """

    def __init__(self, attribute, value=None):
        if value is None:
            message = f"Example has no value for attribute '{attribute}'"
        else:
            message = f"No branch for value '{value}' of attribute '{attribute}'"
        super().__init__(message)
        self.attribute = attribute
        self.value = value


class NotFittedError(ID3Error):
    """Raised if the learner is used before fitting."""
