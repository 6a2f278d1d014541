#!/usr/bin/env python3
"""Validate keyword dictionaries against JSON Schemas and custom rules."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from aniparse.dictionary_loader import DEFAULT_DICTIONARY
from aniparse.dictionary_validator import validate_dictionary


def main(argv: List[str] = None) -> int:
    names = list(argv if argv is not None else sys.argv[1:]) or [DEFAULT_DICTIONARY]

    failures: List[str] = []
    for name in names:
        failures.extend(validate_dictionary(dictionary_name=name))

    if failures:
        print("Dictionary validation failed:")
        for failure in failures:
            print(f" - {failure}")
        return 1

    print("All dictionaries validated successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
