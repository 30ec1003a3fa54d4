#!/usr/bin/env python
"""Inspect how one address moves through the pipeline.

Usage:
    python scripts/inspect_address.py " Jane.Doé @ gmai .com "
    python scripts/inspect_address.py "jane@gmal.com" --fuzzy
    python scripts/inspect_address.py "josé@company.com" --no-ascii-only
    python scripts/inspect_address.py "jane@corp.test" --config mailtidy.yaml
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from mailtidy import ConfigurationError, EmailNormalizer, EmailOptions, load_options


def build_options(args: argparse.Namespace) -> EmailOptions:
    """Combine the config file (if any) with command-line switches."""
    options = load_options(args.config) if args.config else EmailOptions()

    if args.no_ascii_only:
        options = replace(options, ascii_only=False)
    if args.fuzzy:
        options = replace(options, fuzzy_matching=replace(options.fuzzy_matching, enabled=True))
    return options


def print_trace(normalizer: EmailNormalizer, address: str) -> None:
    """Print each stage's output."""
    print("STAGES:")
    print(f"  {'Stage':<34} {'Chg':<4} Output")
    print(f"  {'-'*34} {'-'*4} {'-'*40}")
    print(f"  {'(input)':<34} {'':<4} {address!r}")
    for step in normalizer.trace(address):
        marker = "*" if step.changed else ""
        print(f"  {step.name:<34} {marker:<4} {step.out!r}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("address", help="Address to inspect")
    parser.add_argument("--config", "-c", type=Path, help="YAML options file")
    parser.add_argument("--no-ascii-only", action="store_true", help="Keep non-ASCII characters")
    parser.add_argument("--fuzzy", action="store_true", help="Enable fuzzy domain suggestions")
    args = parser.parse_args()

    try:
        options = build_options(args)
    except ConfigurationError as e:
        print(f"Error: {e}")
        sys.exit(1)

    normalizer = EmailNormalizer(options)

    print_trace(normalizer, args.address)
    print()

    result = normalizer.normalize(args.address)

    print("RESULT:")
    print(f"  final_email: {result.final_email!r}")
    print(f"  valid:       {result.valid}")
    print()

    print("CHANGES:")
    if not result.change_codes:
        print("  (none)")
    for code, reason in zip(result.change_codes, result.changes):
        print(f"  {code:<36} {reason}")
    print()

    print("VALIDATION:")
    if not result.validations:
        print("  (not run)")
    for validation in result.validations:
        status = "ok  " if validation.is_valid else "FAIL"
        print(f"  [{status}] {validation.code:<22} {validation.message}")
        if validation.suggestion is not None:
            s = validation.suggestion
            print(f"         {s.original_domain} -> {s.suggested_domain} (confidence {s.confidence:.2f})")


if __name__ == "__main__":
    main()
