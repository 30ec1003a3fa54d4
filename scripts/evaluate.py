#!/usr/bin/env python3
"""Evaluate the normalizer against labelled addresses.

Each JSONL record holds the raw input, the expected normalized address
(null if the input should be rejected outright) and the expected verdict:

    {"input": " Jane@Gmai.com ", "expected": "jane@gmail.com", "valid": true}

Usage:
    python scripts/evaluate.py data/addresses.jsonl
    python scripts/evaluate.py data/addresses.jsonl --config mailtidy.yaml
    python scripts/evaluate.py data/addresses.jsonl --verbose
"""

import argparse
import json
import sys
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mailtidy import ConfigurationError, EmailNormalizer, EmailOptions, NormalizationResult, load_options


@dataclass
class AddressEvaluation:
    """Evaluation result for a single address."""

    raw: str
    expected: str | None
    expected_valid: bool | None
    result: NormalizationResult

    @property
    def address_match(self) -> bool:
        return self.result.final_email == self.expected

    @property
    def verdict_match(self) -> bool:
        return self.expected_valid is None or self.result.valid == self.expected_valid


@dataclass
class EvaluationResults:
    """Aggregated evaluation results."""

    total: int = 0
    address_matches: int = 0
    verdict_matches: int = 0

    # Change codes seen across all results
    codes: Counter = field(default_factory=Counter)

    # Failed examples for analysis
    failures: list[AddressEvaluation] = field(default_factory=list)

    @property
    def address_match_rate(self) -> float:
        return self.address_matches / self.total if self.total > 0 else 0.0

    @property
    def verdict_match_rate(self) -> float:
        return self.verdict_matches / self.total if self.total > 0 else 0.0


def load_test_data(path: Path) -> list[dict]:
    """Load test records from a JSONL file."""
    examples = []
    with open(path, encoding="utf-8") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as e:
                print(f"Warning: Skipping invalid JSON at line {line_num}: {e}")
                continue
            if "input" not in data:
                print(f"Warning: Skipping record without 'input' at line {line_num}")
                continue
            examples.append(data)
    return examples


def evaluate_single(
    normalizer: EmailNormalizer,
    example: dict,
    results: EvaluationResults,
    verbose: bool = False,
) -> AddressEvaluation:
    """Evaluate the normalizer on a single record."""
    evaluation = AddressEvaluation(
        raw=example["input"],
        expected=example.get("expected"),
        expected_valid=example.get("valid"),
        result=normalizer.normalize(example["input"]),
    )

    results.codes.update(evaluation.result.change_codes)
    if evaluation.address_match:
        results.address_matches += 1
    if evaluation.verdict_match:
        results.verdict_matches += 1

    if not (evaluation.address_match and evaluation.verdict_match):
        results.failures.append(evaluation)

        if verbose:
            print(f"\n--- Failure: {evaluation.raw!r} ---")
            print(f"Expected: {evaluation.expected!r} (valid={evaluation.expected_valid})")
            print(f"Got:      {evaluation.result.final_email!r} (valid={evaluation.result.valid})")
            print(f"Codes:    {', '.join(evaluation.result.change_codes) or '(none)'}")

    return evaluation


def print_results(results: EvaluationResults) -> None:
    """Print evaluation results summary."""
    print("\n" + "=" * 60)
    print("EVALUATION RESULTS")
    print("=" * 60)

    print("\n--- Primary Metrics ---")
    print(f"Total examples:      {results.total}")
    print(
        f"Address match rate:  {100 * results.address_match_rate:.2f}% "
        f"({results.address_matches}/{results.total})"
    )
    print(
        f"Verdict match rate:  {100 * results.verdict_match_rate:.2f}% "
        f"({results.verdict_matches}/{results.total})"
    )

    if results.codes:
        print("\n--- Change Codes ---")
        for code, count in results.codes.most_common():
            print(f"  {code:<36} {count}")

    if results.failures:
        print("\n--- Failures by First Code ---")
        first_codes = Counter(
            f.result.change_codes[0] if f.result.change_codes else "(none)" for f in results.failures
        )
        for code, count in first_codes.most_common():
            print(f"  {code:<36} {count}")

    print("\n" + "=" * 60)


def main() -> None:
    parser = argparse.ArgumentParser(description="Evaluate email normalization accuracy")
    parser.add_argument(
        "test_data",
        type=Path,
        help="Path to JSONL test data file",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="YAML options file (default: built-in options)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print details for each failure",
    )
    parser.add_argument(
        "--limit",
        "-n",
        type=int,
        default=None,
        help="Limit number of examples to evaluate",
    )

    args = parser.parse_args()

    if not args.test_data.exists():
        print(f"Error: Test data file not found: {args.test_data}")
        sys.exit(1)

    try:
        options = load_options(args.config) if args.config else EmailOptions()
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Loading test data from {args.test_data}...")
    examples = load_test_data(args.test_data)
    print(f"Loaded {len(examples)} test examples")

    if args.limit:
        examples = examples[: args.limit]
        print(f"Limiting to {len(examples)} examples")

    normalizer = EmailNormalizer(options)

    print("Evaluating...")
    results = EvaluationResults()

    for i, example in enumerate(examples):
        results.total += 1
        evaluate_single(normalizer, example, results, verbose=args.verbose)

        if (i + 1) % 1000 == 0:
            print(f"  Processed {i + 1}/{len(examples)}")

    print_results(results)


if __name__ == "__main__":
    main()
