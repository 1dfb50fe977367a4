"""
Reader for nominal ARFF files.

Only the subset needed for categorical learning is supported::

    % comment
    @relation weather
    @attribute outlook {sunny, overcast, rainy}
    @attribute 'play tennis' {yes, no}
    @data
    sunny,yes
    rainy,?

Names and values may be single-quoted. ``?`` marks a missing value.
"""

from __future__ import annotations

import io
import os
import re
from typing import TextIO

from loguru import logger

from .data import Dataset
from .errors import ArffFormatError, ValidationError
from .log import progress

DATA_SECTION_MARKER = "@data"
PROGRESS_EVERY = 1000

ATTRIBUTE_LINE = re.compile(
    r"^@attribute\s+(?:'(?P<quoted>.+?)'|(?P<name>\S+?))\s*\{(?P<values>.*)\}\s*$",
    re.IGNORECASE,
)
ANY_ATTRIBUTE_LINE = re.compile(r"^@attribute\b", re.IGNORECASE)
VALUE = re.compile(r"\s*(?:'(?P<quoted>[^']*)'|(?P<plain>[^,]*?))\s*(?:,|$)")


def parse_value_list(text: str) -> list[str]:
    """
    Split a comma separated value list, honouring single quotes.

    Args:
        text (str): e.g. ``"sunny, 'partly cloudy', rainy"``

    Returns:
        list[str]: The values with quotes and surrounding blanks removed.
    """
    values = []
    position = 0
    text = text.strip()
    while position < len(text):
        match = VALUE.match(text, position)
        if match is None or match.end() == position:
            raise ValueError(f"Malformed value list: {text!r}")
        value = match.group("quoted") if match.group("quoted") is not None else match.group("plain")
        values.append(value)
        position = match.end()
    if text.endswith(","):
        raise ValueError(f"Malformed value list: {text!r}")
    return values


def read_arff(source: str | os.PathLike | TextIO, class_attribute: str = "Class") -> Dataset:
    """
    Read an ARFF source into a :class:`Dataset`.

    Args:
        source: Path to an ARFF file, or an open text stream.
        class_attribute (str): Name of the attribute to use as class.

    Returns:
        Dataset: The populated, validated dataset.

    Raises:
        ArffFormatError: If a line cannot be parsed or a row does not fit the schema.
    """
    if isinstance(source, (str, os.PathLike)):
        with open(source, encoding="utf-8") as stream:
            return _read(stream, class_attribute)
    return _read(source, class_attribute)


def loads(text: str, class_attribute: str = "Class") -> Dataset:
    """Parse ARFF from a string."""
    return _read(io.StringIO(text), class_attribute)


def _read(stream: TextIO, class_attribute: str) -> Dataset:
    data = Dataset()
    data.set_class_attribute(class_attribute)

    reading_data = False
    for line_number, raw in enumerate(stream, start=1):
        line = raw.strip()
        if not line or line.startswith("%"):
            continue

        if line.lower() == DATA_SECTION_MARKER:
            reading_data = True
            continue

        if not reading_data:
            _parse_metadata_line(line, line_number, data)
        else:
            _parse_data_line(line, line_number, data)

    try:
        data.validate()
    except ValidationError as e:
        raise ArffFormatError(str(e)) from e
    logger.info("Read {} attributes and {} examples", len(data.attributes), len(data))
    return data


def _parse_metadata_line(line: str, line_number: int, data: Dataset) -> None:
    # The only metadata lines we care about are attributes
    match = ATTRIBUTE_LINE.match(line)
    if match is None:
        if ANY_ATTRIBUTE_LINE.match(line):
            raise ArffFormatError(f"Only nominal attributes are supported: {line!r}", line_number)
        return

    name = match.group("quoted") or match.group("name")
    try:
        values = parse_value_list(match.group("values"))
        if not values or any(v == "" for v in values):
            raise ValueError(f"Attribute '{name}' did not specify a list of values")
        data.add_attribute(name, values)
    except ValueError as e:
        raise ArffFormatError(str(e), line_number) from e


def _parse_data_line(line: str, line_number: int, data: Dataset) -> None:
    try:
        data.add_example(parse_value_list(line))
    except ValueError as e:
        raise ArffFormatError(str(e), line_number) from e

    if len(data) % PROGRESS_EVERY == 0:
        progress("Read {} examples", len(data))
