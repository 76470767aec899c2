"""
Pipeline: report county coverage and missing values for every stage.

Runs the stages (through the cache when --cache-dir is given) and compares
each stage table against the county universe.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.configs.settings import StudyConfig
from src.coverage_inspector.inspector import coverage_report, missing_counties, missing_value_counts
from src.study_table.builder import run_stages

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")


def _dataframe_to_markdown(df) -> str:
    """Markdown table; floats rounded to 4 places, columns padded to their widest cell."""
    cells = df.round(4).astype(str)
    widths = {c: max([len(str(c)), *(len(v) for v in cells[c])]) for c in cells.columns}

    def _row(values):
        return "| " + " | ".join(v.ljust(widths[c]) for c, v in zip(cells.columns, values)) + " |"

    lines = [_row([str(c) for c in cells.columns])]
    lines.append("| " + " | ".join(":" + "-" * max(2, widths[c]) for c in cells.columns) + " |")
    lines.extend(_row(list(r)) for r in cells.itertuples(index=False))
    return "\n".join(lines)


def inspect_to_markdown(report, tables: dict, universe) -> str:
    blocks = ["## coverage", _dataframe_to_markdown(report)]
    for name, df in tables.items():
        blocks.append(f"## {name}")
        blocks.append(_dataframe_to_markdown(missing_value_counts(df)))
        gaps = missing_counties(df, universe)
        if gaps:
            blocks.append("Missing counties: " + ", ".join(gaps))
    return "\n\n".join(blocks)


def results_to_json(report, tables: dict, universe) -> dict:
    """Convert coverage results to a JSON-serializable dict."""
    return {
        "coverage": report.to_dict(orient="records"),
        "tables": {
            name: {
                "missing_values": missing_value_counts(df).to_dict(orient="records"),
                "missing_counties": missing_counties(df, universe),
            }
            for name, df in tables.items()
        },
    }


def main():
    parser = argparse.ArgumentParser(
        description="Report county coverage and missing values of every stage against the county universe."
    )
    parser.add_argument(
        "--out",
        type=str,
        default="",
        help="Output file path. Use .json for JSON or .md for markdown; if empty, print to stdout.",
    )
    parser.add_argument("--input-root", type=str, default=None, help="Root directory of raw inputs.")
    parser.add_argument("--cache-dir", type=str, default=None, help="Stage cache directory.")
    parser.add_argument("--year", type=int, default=None, help="Study year (default: 2010)")
    args = parser.parse_args()

    config = StudyConfig.from_env(input_root=args.input_root, cache_dir=args.cache_dir, year=args.year)
    universe, tables = run_stages(config)
    report = coverage_report(tables, universe)
    as_json = args.out.lower().endswith(".json") if args.out else False

    if as_json:
        text = json.dumps(results_to_json(report, tables, universe), indent=2)
    else:
        text = inspect_to_markdown(report, tables, universe)
    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding="utf-8")
        print(f"Wrote coverage report to: {out_path}")
    else:
        print(text)


if __name__ == "__main__":
    main()
