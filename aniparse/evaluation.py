#!/usr/bin/env python3
"""
Evaluation helpers for the anime filename parser.

Provides two modes:
- blind: Coverage-first metrics without reference labels
- reference: Accuracy metrics vs expected elements

Reference data is a JSON list of test cases:
    [{"id": 1, "file_name": "...", "ignore": false,
      "results": {"anime_title": "...", "episode_number": ["01", "02"]}}]
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from openpyxl import load_workbook

from .elements import ElementCategory
from .excel_writer import ExcelSheetData, write_excel_workbook
from .filename_parser import FilenameParser
from .tokens import TokenCategory

logger = logging.getLogger(__name__)

# Element categories reported as columns, in order
REPORT_FIELDS = [
    ElementCategory.ANIME_TITLE,
    ElementCategory.ANIME_SEASON,
    ElementCategory.ANIME_YEAR,
    ElementCategory.ANIME_TYPE,
    ElementCategory.EPISODE_NUMBER,
    ElementCategory.EPISODE_NUMBER_ALT,
    ElementCategory.EPISODE_TITLE,
    ElementCategory.VOLUME_NUMBER,
    ElementCategory.RELEASE_GROUP,
    ElementCategory.RELEASE_VERSION,
    ElementCategory.RELEASE_INFORMATION,
    ElementCategory.VIDEO_RESOLUTION,
    ElementCategory.VIDEO_TERM,
    ElementCategory.AUDIO_TERM,
    ElementCategory.SOURCE,
    ElementCategory.LANGUAGE,
    ElementCategory.SUBTITLES,
    ElementCategory.DEVICE_COMPATIBILITY,
    ElementCategory.OTHER,
    ElementCategory.FILE_CHECKSUM,
    ElementCategory.FILE_EXTENSION,
]
FIELD_NAMES = [category.value for category in REPORT_FIELDS]

# Values of repeated elements are joined with this separator in reports
VALUE_SEPARATOR = " | "


def join_values(value: Union[None, str, Sequence[str]]) -> Optional[str]:
    """Flatten a single value or a list of values to one comparable string."""
    if value is None or value == "" or value == []:
        return None
    if isinstance(value, str):
        return value
    return VALUE_SEPARATOR.join(str(v) for v in value)


@dataclass
class ParsedRow:
    """A single parsed filename with its elements flattened per category."""
    input: str
    fields: Dict[str, Optional[str]] = field(default_factory=dict)
    title_found: bool = False
    unlabeled_tokens: List[str] = field(default_factory=list)
    token_count: int = 0

    def get(self, name: str) -> Optional[str]:
        return self.fields.get(name)

    def to_excel_row(self) -> List[Any]:
        """Convert to Excel row maintaining column order."""
        return (
            [self.input]
            + [self.fields.get(name) or "" for name in FIELD_NAMES]
            + [
                "yes" if self.title_found else "no",
                VALUE_SEPARATOR.join(self.unlabeled_tokens),
                self.token_count,
            ]
        )

    @staticmethod
    def get_headers() -> List[str]:
        """Get Excel column headers in proper order."""
        return ["input"] + FIELD_NAMES + ["title_found", "unlabeled_tokens", "token_count"]


@dataclass
class ReferenceCase:
    """One labelled filename from a reference file."""
    file_name: str
    expected: Dict[str, Optional[str]]
    case_id: Any = None


def parse_filename(parser: FilenameParser, filename: str) -> ParsedRow:
    """Parse a single filename and flatten the result into a ParsedRow."""
    result = parser.parse(filename)
    grouped = result.to_dict()

    unlabeled = [
        token.content for token in result.tokens
        if token.category == TokenCategory.UNKNOWN and token.content.strip()
    ]
    return ParsedRow(
        input=filename,
        fields={name: join_values(grouped.get(name)) for name in FIELD_NAMES},
        title_found=result.title_found,
        unlabeled_tokens=unlabeled,
        token_count=len(result.tokens),
    )


def read_input_file(filepath: Union[str, Path], limit: Optional[int] = None) -> List[str]:
    """
    Read filenames to evaluate.

    Handles plain text (one filename per line), Excel workbooks with an
    'input' column, and JSON reference files.
    """
    filepath = Path(filepath)
    filenames: List[str] = []

    if filepath.suffix == ".json":
        filenames = [case.file_name for case in load_reference_cases(filepath)]
    elif filepath.suffix == ".xlsx":
        wb = load_workbook(filepath, read_only=True)
        try:
            ws = wb.active
            if ws is None:
                raise ValueError("Excel file has no usable worksheet")

            rows = ws.iter_rows(values_only=True)
            headers = next(rows, ())
            normalized = [str(h).strip().lower() if h is not None else "" for h in headers]
            if "input" not in normalized:
                raise ValueError("Could not find 'input' column in Excel file")
            input_idx = normalized.index("input")

            for row in rows:
                if row and input_idx < len(row) and row[input_idx]:
                    filenames.append(str(row[input_idx]))
        finally:
            wb.close()
    else:
        with filepath.open("r", encoding="utf-8", errors="replace") as f:
            filenames = [line.strip() for line in f if line.strip()]

    return filenames[:limit] if limit else filenames


def load_reference_cases(filepath: Union[str, Path]) -> List[ReferenceCase]:
    """
    Load labelled test cases from a JSON reference file.

    Cases flagged "ignore" are skipped.

    Raises:
        ValueError: If the file is not a list of objects with a file_name
    """
    filepath = Path(filepath)
    with filepath.open("r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError(f"Reference file {filepath} must contain a JSON list")

    cases = []
    for idx, entry in enumerate(data):
        if not isinstance(entry, dict) or not entry.get("file_name"):
            raise ValueError(f"Reference entry {idx} in {filepath} has no file_name")
        if entry.get("ignore"):
            continue
        results = entry.get("results") or {}
        cases.append(ReferenceCase(
            file_name=entry["file_name"],
            expected={name: join_values(results.get(name)) for name in FIELD_NAMES},
            case_id=entry.get("id"),
        ))
    return cases


def _rate(count: int, opportunities: int) -> float:
    return round(count / opportunities * 100, 2) if opportunities > 0 else 0.0


def calculate_blind_metrics(rows: List[ParsedRow]) -> Dict[str, Any]:
    """
    Calculate coverage metrics for blind mode.

    Metrics include:
    - Field coverage (% of rows with each field populated)
    - Title rate (% of rows where a title was found)
    - Most common unlabeled tokens
    """
    total_rows = len(rows)
    if total_rows == 0:
        return {'mode': 'blind', 'total_rows': 0, 'field_coverage': {}, 'title_rate': 0.0,
                'top_unlabeled_tokens': [], 'timestamp': datetime.now().isoformat()}

    field_coverage = {
        name: round(sum(1 for r in rows if r.get(name)) / total_rows, 4)
        for name in FIELD_NAMES
    }
    unlabeled = Counter(token for r in rows for token in r.unlabeled_tokens)

    return {
        'mode': 'blind',
        'total_rows': total_rows,
        'field_coverage': field_coverage,
        'title_rate': round(sum(1 for r in rows if r.title_found) / total_rows, 4),
        'top_unlabeled_tokens': [{'token': t, 'count': c} for t, c in unlabeled.most_common(20)],
        'timestamp': datetime.now().isoformat()
    }


def calculate_reference_metrics(
    rows: List[ParsedRow],
    cases: List[ReferenceCase],
    samples: int = 10
) -> Dict[str, Any]:
    """
    Compare parsed rows with reference cases, field by field.

    1. False negative rate: reference has a value but the parse is empty
    2. False positive rate: reference is empty but the parse has a value
    3. Accuracy rate: reference has a value and the parse matches it exactly
    4. Perfect rate: every field of the file matches

    Raises:
        ValueError: If the row and case counts differ
    """
    total_rows = len(rows)
    if len(cases) != total_rows:
        raise ValueError(f"Row count mismatch: {total_rows} parsed vs {len(cases)} reference")

    field_metrics: Dict[str, Dict[str, Any]] = {}
    mismatches: List[Dict[str, Any]] = []
    totals = Counter()

    for name in FIELD_NAMES:
        counts = Counter()
        field_mismatches = []

        for row, case in zip(rows, cases):
            parsed_val = row.get(name)
            ref_val = case.expected.get(name)

            if ref_val:
                counts['fn_opps'] += 1
                counts['acc_opps'] += 1
                if not parsed_val:
                    counts['fns'] += 1
                    field_mismatches.append(_mismatch(row, name, 'false_negative', parsed_val, ref_val))
                elif parsed_val == ref_val:
                    counts['acc'] += 1
                else:
                    field_mismatches.append(_mismatch(row, name, 'incorrect', parsed_val, ref_val))
            else:
                counts['fp_opps'] += 1
                if parsed_val:
                    counts['fps'] += 1
                    field_mismatches.append(_mismatch(row, name, 'false_positive', parsed_val, ref_val))

        totals.update(counts)
        field_metrics[name] = {
            'false_negative_rate': _rate(counts['fns'], counts['fn_opps']),
            'false_negative_count': counts['fns'],
            'false_positive_rate': _rate(counts['fps'], counts['fp_opps']),
            'false_positive_count': counts['fps'],
            'accuracy_rate': _rate(counts['acc'], counts['acc_opps']),
            'accurate_count': counts['acc'],
            'accuracy_opportunities': counts['acc_opps'],
        }
        mismatches.extend(field_mismatches[:samples])

    perfect = sum(
        1 for row, case in zip(rows, cases)
        if all(row.get(name) == case.expected.get(name) for name in FIELD_NAMES)
    )

    return {
        'mode': 'reference',
        'key_metrics': {
            'false_negative_rate': _rate(totals['fns'], totals['fn_opps']),
            'false_positive_rate': _rate(totals['fps'], totals['fp_opps']),
            'accuracy_rate': _rate(totals['acc'], totals['acc_opps']),
            'perfect_rate': _rate(perfect, total_rows),
        },
        'summary': {
            'total_files': total_rows,
            'files_perfectly_parsed': perfect,
            'false_negatives': totals['fns'],
            'false_positives': totals['fps'],
            'accurate_matches': totals['acc'],
            'accuracy_opportunities': totals['acc_opps'],
        },
        'field_breakdown': field_metrics,
        'sample_mismatches': mismatches,
        'timestamp': datetime.now().isoformat()
    }


def _mismatch(row: ParsedRow, name: str, kind: str, parsed: Optional[str], expected: Optional[str]) -> Dict[str, Any]:
    return {'input': row.input, 'field': name, 'type': kind, 'parsed': parsed, 'expected': expected}


def create_diff_rows(rows: List[ParsedRow], cases: List[ReferenceCase]) -> List[ParsedRow]:
    """
    Create diff rows showing differences between parsed and reference.

    Differing cells read {"expected": <ref>, "returned": <parsed>}; matching
    cells keep the agreed value.
    """
    diff_rows = []
    for row, case in zip(rows, cases):
        fields = {}
        for name in FIELD_NAMES:
            parsed_val, ref_val = row.get(name), case.expected.get(name)
            if parsed_val == ref_val:
                fields[name] = parsed_val
            else:
                fields[name] = json.dumps({"expected": ref_val, "returned": parsed_val}, ensure_ascii=False)
        diff_rows.append(ParsedRow(
            input=row.input,
            fields=fields,
            title_found=row.title_found,
            unlabeled_tokens=row.unlabeled_tokens,
            token_count=row.token_count,
        ))
    return diff_rows


def is_discrepancy_value(value: Any) -> bool:
    """Check if a cell value represents a discrepancy."""
    return value is not None and str(value).startswith('{"expected":')


def write_excel_output(
    rows: List[ParsedRow],
    output_path: Union[str, Path],
    mode: str,
    cases: Optional[List[ReferenceCase]] = None
) -> Path:
    """
    Write parsed results to an Excel workbook.

    Blind mode writes a single results sheet. Reference mode adds a Diff
    sheet with discrepancies highlighted in yellow.
    """
    headers = ParsedRow.get_headers()
    sheets = [ExcelSheetData(name="Results", headers=headers, rows=[r.to_excel_row() for r in rows])]

    if mode == 'reference' and cases:
        sheets.append(ExcelSheetData(
            name="Diff",
            headers=headers,
            rows=[r.to_excel_row() for r in create_diff_rows(rows, cases)],
            highlight_predicate=is_discrepancy_value,
        ))

    return write_excel_workbook(output_path, sheets)


def write_json_metrics(metrics: Dict[str, Any], output_path: Union[str, Path]) -> Path:
    """Write metrics to JSON file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open('w', encoding='utf-8') as f:
        json.dump(metrics, f, indent=2, ensure_ascii=False)
    return output_path
