#!/usr/bin/env python3
"""
Evaluation harness for the anime filename parser.

Provides two modes:
- blind: Coverage-first metrics without reference labels
- reference: Accuracy metrics vs a JSON reference file

Outputs:
- Excel workbook with parsed results
- JSON metrics file for automation
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add parent directory to path to import the parser package
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from aniparse import FilenameParser, load_options
from aniparse.evaluation import (
    calculate_blind_metrics,
    calculate_reference_metrics,
    load_reference_cases,
    parse_filename,
    read_input_file,
    write_excel_output,
    write_json_metrics,
)


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Evaluate the anime filename parser with coverage or reference metrics'
    )
    parser.add_argument(
        '--mode',
        choices=['blind', 'reference'],
        default='blind',
        help='Evaluation mode: blind (coverage) or reference (vs labels)'
    )
    parser.add_argument(
        '--input',
        required=True,
        help='Filenames (text, one per line), Excel with an input column, or JSON reference'
    )
    parser.add_argument(
        '--output-excel',
        help='Output Excel file path (default: metrics/MODE-YYYYMMDD-HHMMSS.xlsx)'
    )
    parser.add_argument(
        '--output-json',
        help='Output JSON metrics file (default: metrics/MODE-YYYYMMDD-HHMMSS.json)'
    )
    parser.add_argument(
        '--limit',
        type=int,
        help='Limit number of files to process'
    )
    parser.add_argument(
        '--samples',
        type=int,
        default=10,
        help='Number of mismatch samples to capture per field (reference mode)'
    )
    parser.add_argument(
        '--config',
        help='JSON file with parser options'
    )
    parser.add_argument(
        '--no-write',
        action='store_true',
        help='Dry-run mode: skip writing output files'
    )
    parser.add_argument(
        '--skip-excel',
        action='store_true',
        help='Skip Excel output for faster CI runs'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser.parse_args(argv)


def print_summary(metrics, samples: int) -> None:
    if metrics['mode'] == 'blind':
        print(f"Total rows: {metrics['total_rows']}")
        print(f"Title found: {metrics['title_rate']:.2%}")
        print("\nField coverage:")
        for name, coverage in metrics['field_coverage'].items():
            print(f"  {name}: {coverage:.2%}")
        if metrics['top_unlabeled_tokens']:
            print("\nTop unlabeled tokens:")
            for item in metrics['top_unlabeled_tokens'][:5]:
                print(f"  {item['token']}: {item['count']} occurrences")
        return

    key_metrics = metrics['key_metrics']
    summary = metrics['summary']

    print(f"\n{'='*60}")
    print(f"{'KEY METRICS':^60}")
    print(f"{'='*60}")
    print(f"False Negative Rate:             {key_metrics['false_negative_rate']:>6.2f}%")
    print(f"False Positive Rate:             {key_metrics['false_positive_rate']:>6.2f}%")
    print(f"Accuracy Rate:                   {key_metrics['accuracy_rate']:>6.2f}%")
    print(f"Perfect Rate:                    {key_metrics['perfect_rate']:>6.2f}%")
    print(f"\nTotal files:                     {summary['total_files']:>6}")
    print(f"Files perfectly parsed:          {summary['files_perfectly_parsed']:>6}")

    print(f"\n{'='*60}")
    print(f"{'FIELD BREAKDOWN':^60}")
    print(f"{'='*60}")
    for name, data in metrics['field_breakdown'].items():
        if not data['accuracy_opportunities'] and not data['false_positive_count']:
            continue
        print(f"{name:<24} acc {data['accuracy_rate']:>6.2f}%  "
              f"fn {data['false_negative_count']:>4}  fp {data['false_positive_count']:>4}")

    if metrics.get('sample_mismatches'):
        print(f"\nSample mismatches (up to {samples} per field):")
        for mismatch in metrics['sample_mismatches'][:10]:
            print(f"\n  [{mismatch['type'].upper()}] {mismatch['field']}")
            print(f"  File: {mismatch['input'][:70]}")
            print(f"    Expected: {mismatch['expected']}")
            print(f"    Parsed:   {mismatch['parsed']}")


def main(argv=None) -> int:
    """Main evaluation harness entry point."""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    output_excel = Path(args.output_excel) if args.output_excel else Path("metrics") / f"{args.mode}-{timestamp}.xlsx"
    output_json = Path(args.output_json) if args.output_json else Path("metrics") / f"{args.mode}-{timestamp}.json"

    print(f"=== Anime Filename Parser Evaluation ({args.mode} mode) ===")
    print(f"Input: {args.input}")

    try:
        options = load_options(args.config)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 2

    cases = None
    if args.mode == 'reference':
        cases = load_reference_cases(args.input)
        if args.limit:
            cases = cases[:args.limit]
        filenames = [case.file_name for case in cases]
    else:
        filenames = read_input_file(args.input, args.limit)
    print(f"Found {len(filenames)} filenames to process")

    parser = FilenameParser(options)
    rows = []
    for idx, filename in enumerate(filenames, 1):
        if idx % 100 == 0:
            print(f"  Processed {idx}/{len(filenames)}...")
        rows.append(parse_filename(parser, filename))

    if args.mode == 'blind':
        metrics = calculate_blind_metrics(rows)
    else:
        metrics = calculate_reference_metrics(rows, cases, args.samples)

    print("\n=== Metrics Summary ===")
    print_summary(metrics, args.samples)

    if args.no_write:
        print("\nDry-run complete (no files written)")
        return 0

    if not args.skip_excel:
        print(f"\nWriting Excel output to {output_excel}...")
        write_excel_output(rows, output_excel, args.mode, cases=cases)
    print(f"Writing JSON metrics to {output_json}...")
    write_json_metrics(metrics, output_json)
    print("\nEvaluation complete!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
