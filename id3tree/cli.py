"""
Command line entry point.

    id3tree train.arff [test.arff] [--confidence 0.99] [--unknown-as-value] [--gain-ratio]

Learns a tree from the training file, prints it, then reports the accuracy on
the test file (or on the training file when no test file is given).
"""

from __future__ import annotations

import argparse
import sys
import time
from datetime import timedelta

from loguru import logger

from .arff import read_arff
from .classifier import DecisionTreeClassifier
from .errors import ID3Error
from .evaluator import AccuracyEvaluator
from .id3 import ID3
from .log import configure_logging
from .tree import render, to_dot


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="id3tree", description="Learn and evaluate an ID3 decision tree.")
    parser.add_argument("train", help="training data in ARFF format")
    parser.add_argument("test", nargs="?", help="test data in ARFF format (defaults to the training data)")
    parser.add_argument("--class-attribute", default="Class", help="name of the class attribute (default: %(default)s)")
    parser.add_argument(
        "--confidence",
        type=float,
        default=0.0,
        help="confidence level of the chi-square split stopping test, 0 disables it (default: %(default)s)",
    )
    parser.add_argument("--unknown-as-value", action="store_true", help="treat '?' as a regular attribute value")
    parser.add_argument("--gain-ratio", action="store_true", help="select attributes by gain ratio")
    parser.add_argument("--skip-incompatible", action="store_true", help="count unclassifiable test examples as errors")
    parser.add_argument("--output", help="write the tree to this file instead of stdout")
    parser.add_argument("--dot", help="also write the tree as Graphviz DOT source to this file")
    parser.add_argument("--log-level", default="WARNING", help="TRACE, DEBUG, INFO, PROGRESS, WARNING or ERROR")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level.upper())
    start = time.perf_counter()

    try:
        learner = ID3(
            split_stopping_confidence=args.confidence,
            treat_unknown_as_value=args.unknown_as_value,
            criterion="gain_ratio" if args.gain_ratio else "information_gain",
        )
    except ValueError as e:
        logger.error("{}", e)
        return 2

    try:
        train = read_arff(args.train, args.class_attribute)
        test = read_arff(args.test, args.class_attribute) if args.test else train

        tree = learner.fit(train).tree_
        text = render(tree)
        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(text + "\n")
        else:
            print(text)
        if args.dot:
            with open(args.dot, "w", encoding="utf-8") as f:
                f.write(to_dot(tree) + "\n")

        evaluator = AccuracyEvaluator(DecisionTreeClassifier(tree), skip_incompatible=args.skip_incompatible)
        report = evaluator.evaluate(test)
    except (ID3Error, OSError) as e:
        logger.error("{}", e)
        return 2

    print(f"Accuracy: {report.accuracy}")
    if report.skipped:
        print(f"Skipped: {report.skipped}")
    print(f"Runtime: {timedelta(seconds=time.perf_counter() - start)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
