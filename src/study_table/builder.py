"""
Compiler: run every source stage and join the results into the study table.

Tables are joined on fips with successive pairwise left joins, starting from
the census table (which covers the whole county universe). Region is joined
last through the state postal code.
"""

import logging
from functools import reduce

import pandas as pd

from src.configs.regions import STATE_FIPS_TO_POSTAL, STATE_REGION
from src.configs.settings import StudyConfig
from src.coverage_inspector.inspector import coverage_report
from src.loaders.census import load_census
from src.loaders.climate import load_climate
from src.loaders.exposure import load_exposure
from src.loaders.geography import county_universe, read_counties
from src.loaders.outcome import load_outcome
from src.loaders.survey import load_survey
from src.table_builder.cache import cached

logger = logging.getLogger(__name__)

KEY_COL = "fips"
STAGE_ORDER = ["census", "exposure", "survey", "climate", "outcome"]


def check_unique_keys(df: pd.DataFrame, name: str, key: str = KEY_COL) -> None:
    """Raise ValueError when a table has duplicate (or missing) join keys."""
    if df[key].isna().any():
        raise ValueError(f"Table '{name}' has {int(df[key].isna().sum())} rows without {key}")
    dup = df[key].duplicated(keep=False)
    if dup.any():
        raise ValueError(f"Table '{name}' has duplicate {key} values: {sorted(set(df.loc[dup, key]))[:10]}")


def join_and_reduce(left: pd.DataFrame, right: pd.DataFrame, key: str = KEY_COL) -> pd.DataFrame:
    """Left join right onto left by key; overlapping non-key columns keep the left value."""
    drop_cols = [c for c in right.columns if c in left.columns and c != key]
    return left.merge(right.drop(columns=drop_cols), on=key, how="left")


def compile_study_table(tables: dict[str, pd.DataFrame], key: str = KEY_COL) -> pd.DataFrame:
    """Join tables in insertion order; every table must have unique keys.

    Args:
        tables: {name: DataFrame}; the first table defines the row set.
        key: Join key.

    Returns:
        Joined DataFrame, one row per key of the first table.
    """
    if not tables:
        raise ValueError("No tables to compile")
    for name, df in tables.items():
        check_unique_keys(df, name, key)
    out = reduce(lambda left, right: join_and_reduce(left, right, key), tables.values())
    logger.info(f"Compiled {len(tables)} tables: {len(out)} rows, {len(out.columns)} columns")
    return out


def region_table() -> pd.DataFrame:
    return pd.DataFrame(
        [{"state": state, "region": region} for state, region in STATE_REGION.items()]
    )


def attach_region(table: pd.DataFrame, key: str = KEY_COL) -> pd.DataFrame:
    """Add state postal code (from the FIPS prefix) and census region."""
    out = table.copy()
    out["state"] = out[key].str[:2].map(STATE_FIPS_TO_POSTAL)
    unknown = out["state"].isna()
    if unknown.any():
        logger.warning(f"{int(unknown.sum())} rows have a state FIPS with no postal code")
    # Left join on purpose: a region row with no county would enter the table without a fips
    return out.merge(region_table(), on="state", how="left")


def run_stages(config: StudyConfig) -> tuple[pd.DataFrame, dict[str, pd.DataFrame]]:
    """Run every source stage (memoized under config.cache_dir).

    Returns:
        (universe, {stage name: table}) with tables in STAGE_ORDER.
    """
    counties = cached(read_counties, config.cache_dir)(config)
    universe = county_universe(counties)
    area = pd.DataFrame(counties[["fips", "area_sqmi"]])

    stages = {
        "census": lambda: cached(load_census, config.cache_dir)(config, area),
        "exposure": lambda: cached(load_exposure, config.cache_dir)(config, counties),
        "survey": lambda: cached(load_survey, config.cache_dir)(config, universe),
        "climate": lambda: cached(load_climate, config.cache_dir)(config, counties),
        "outcome": lambda: cached(load_outcome, config.cache_dir)(config, universe),
    }
    tables = {}
    for name in STAGE_ORDER:
        logger.info(f"--- {name} ---")
        tables[name] = stages[name]()
    return universe, tables


def build_study_table(config: StudyConfig) -> pd.DataFrame:
    """Build the final county study table for config.year."""
    universe, tables = run_stages(config)
    report = coverage_report(tables, universe)
    for row in report.itertuples(index=False):
        logger.info(
            f"{row.table}: {row.counties_covered}/{row.universe_size} counties "
            f"({row.coverage:.1%}), {row.counties_missing} missing"
        )
    out = attach_region(compile_study_table(tables))
    return out.sort_values(KEY_COL).reset_index(drop=True)
