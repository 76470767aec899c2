"""
Pipeline: build the county-level study table for one year.

Stages (each memoized under --cache-dir when given):
- geography: county boundaries, contiguous US (reference universe)
- census: ACS 5-year shares, medians, density
- exposure: gridded PM2.5 averaged within counties
- survey: BRFSS BMI and smoking prevalence
- climate: gridMET temperature and humidity, annual / summer / winter
- outcome: synthetic Medicare mortality and demographics

- Common key: fips (string, 5-digit; preserved on output).
- Join: successive left joins from the census table, then region by state.

Output: data/processed_data/study_table_<year>.csv (or .parquet)
"""

import argparse
import logging
import sys
from pathlib import Path

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.configs.settings import StudyConfig
from src.study_table.builder import build_study_table
from src.table_builder.cache import clear_cache

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "data/processed_data/study_table_{year}.csv"


def write_table(df, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".parquet":
        df.to_parquet(path, index=False)
    else:
        df.to_csv(path, index=False)


def main():
    parser = argparse.ArgumentParser(
        description="Build the county study table (exposure, census, survey, climate, outcome, region)."
    )
    parser.add_argument(
        "--input-root",
        type=str,
        default=None,
        help="Root directory of raw inputs (default: $STUDY_INPUT_ROOT or data/raw_data)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=DEFAULT_OUTPUT,
        help=f"Output .csv or .parquet (default: {DEFAULT_OUTPUT})",
    )
    parser.add_argument("--year", type=int, default=None, help="Study year (default: 2010)")
    parser.add_argument(
        "--cache-dir",
        type=str,
        default=None,
        help="Directory for memoized stage results (default: $STUDY_CACHE_DIR; unset disables caching)",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Drop memoized stage results before running (other files in the directory are kept)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the survey imputation draws")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    args = parser.parse_args()

    if args.quiet:
        logging.getLogger().setLevel(logging.WARNING)

    config = StudyConfig.from_env(
        input_root=args.input_root,
        year=args.year,
        cache_dir=args.cache_dir,
        seed=args.seed,
    )
    if not config.input_root.exists():
        print(f"Error: not found {config.input_root}", file=sys.stderr)
        sys.exit(1)
    if args.clear_cache:
        clear_cache(config.cache_dir)

    try:
        out = build_study_table(config)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    output_path = Path(args.output.format(year=config.year))
    if not output_path.is_absolute():
        output_path = project_root / output_path
    write_table(out, output_path)
    logger.info(f"Study table: {len(out)} rows, {len(out.columns)} columns")
    print(f"Saved {len(out)} rows to {output_path}")


if __name__ == "__main__":
    main()
    sys.exit(0)
