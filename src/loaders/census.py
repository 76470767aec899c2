"""
County census fields from the ACS 5-year API.

Raw estimates are summed into numerator/denominator groups
(CENSUS_VARIABLE_GROUPS) and turned into shares, medians and density.
"""

import logging

import numpy as np
import pandas as pd
import requests

from src.configs.census_variables import CENSUS_VARIABLE_GROUPS, all_variables
from src.configs.corrections import TEXAS_FLOORED_FIELDS, TEXAS_IMPUTED_FIELDS, TEXAS_NEIGHBORS
from src.configs.settings import StudyConfig
from src.imputation import NeighborMeanFill

logger = logging.getLogger(__name__)

SHARE_FIELDS = ["cs_hispanic", "cs_black", "cs_white", "cs_native", "cs_asian"]
CENSUS_FIELDS = [
    "cs_poverty",
    "cs_hispanic",
    "cs_black",
    "cs_white",
    "cs_native",
    "cs_asian",
    "cs_other",
    "cs_ed_below_highschool",
    "cs_household_income",
    "cs_median_house_value",
    "cs_total_population",
    "cs_area",
    "cs_population_density",
    "cs_log_total_population",
    "cs_log_population_density",
]

# (output field, numerator group, denominator group); denominator None keeps the raw value
_RATIOS = [
    ("cs_poverty", "below_poverty", "poverty_universe"),
    ("cs_hispanic", "hispanic", "race_universe"),
    ("cs_black", "black", "race_universe"),
    ("cs_white", "white", "race_universe"),
    ("cs_native", "native", "race_universe"),
    ("cs_asian", "asian", "race_universe"),
    ("cs_ed_below_highschool", "below_highschool", "education_universe"),
    ("cs_household_income", "household_income", None),
    ("cs_median_house_value", "median_house_value", None),
    ("cs_total_population", "total_population", None),
]


def _chunks(items: list, size: int) -> list[list]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def _request_chunk(url: str, variables: list[str], api_key: str, timeout: int) -> pd.DataFrame:
    params = {"get": ",".join(variables), "for": "county:*", "key": api_key}
    response = requests.get(url, params=params, timeout=timeout)
    response.raise_for_status()
    data = response.json()
    return pd.DataFrame(data[1:], columns=data[0])


def fetch_census_estimates(config: StudyConfig, variables: list[str] | None = None) -> pd.DataFrame:
    """Download raw county estimates for config.year.

    Args:
        config: Run configuration; census_api_key is required.
        variables: Estimate variable names (default: the full catalog).

    Returns:
        DataFrame with fips and one numeric column per variable. ACS annotation
        values (large negative numbers) are returned as missing.
    """
    if not config.census_api_key:
        raise ValueError("CENSUS_API_KEY is not set")
    spec = config.source("census")
    url = spec["url"].format(year=config.year)
    variables = variables or all_variables()

    out = None
    for chunk in _chunks(variables, spec.get("max_fields", 49)):
        df = _request_chunk(url, chunk, config.census_api_key, spec.get("timeout", 60))
        df["fips"] = df["state"].str.zfill(2) + df["county"].str.zfill(3)
        df = df.drop(columns=["state", "county"])
        out = df if out is None else out.merge(df, on="fips", how="outer")
    logger.info(f"Census API: {len(out)} counties, {len(variables)} variables")

    for v in variables:
        values = pd.to_numeric(out[v], errors="coerce")
        out[v] = values.mask(values < 0)
    return out[["fips", *variables]]


def _group_totals(raw: pd.DataFrame) -> pd.DataFrame:
    totals = pd.DataFrame({"fips": raw["fips"]})
    for group, variables in CENSUS_VARIABLE_GROUPS.items():
        totals[group] = raw[variables].sum(axis=1, min_count=1)
    return totals


def _log10_positive(values: pd.Series) -> pd.Series:
    """log10 for positive values; zero or negative input is missing."""
    values = values.astype("float64")
    return np.log10(values.where(values > 0))


def derive_census_fields(raw: pd.DataFrame, counties: pd.DataFrame) -> pd.DataFrame:
    """Derive census fields for every county in the universe.

    Args:
        raw: fips + raw estimate columns (see fetch_census_estimates).
        counties: Universe with fips and area_sqmi.

    Returns:
        DataFrame with fips + CENSUS_FIELDS, one row per universe county.
    """
    base = pd.DataFrame(counties[["fips", "area_sqmi"]]).merge(raw, on="fips", how="left")
    variables = [c for c in raw.columns if c != "fips"]

    # Zero-fill gaps except the curated counties, which are filled from neighbors below
    curated = base["fips"].isin(TEXAS_NEIGHBORS)
    base.loc[~curated, variables] = base.loc[~curated, variables].fillna(0)

    totals = _group_totals(base)
    out = pd.DataFrame({"fips": base["fips"]})
    for field, numerator, denominator in _RATIOS:
        if denominator is None:
            out[field] = totals[numerator]
        else:
            out[field] = totals[numerator] / totals[denominator]
    out = out.replace([np.inf, -np.inf], np.nan)

    out = NeighborMeanFill(
        TEXAS_NEIGHBORS, TEXAS_IMPUTED_FIELDS, floor_fields=TEXAS_FLOORED_FIELDS
    ).fill(out)

    out["cs_other"] = (1 - out[SHARE_FIELDS].sum(axis=1, min_count=len(SHARE_FIELDS))).clip(lower=0)
    out["cs_area"] = base["area_sqmi"].astype("float64")
    out["cs_population_density"] = (out["cs_total_population"] / out["cs_area"]).replace([np.inf, -np.inf], np.nan)
    out["cs_log_total_population"] = _log10_positive(out["cs_total_population"])
    out["cs_log_population_density"] = _log10_positive(out["cs_population_density"])
    return out[["fips", *CENSUS_FIELDS]]


def load_census(config: StudyConfig, counties: pd.DataFrame) -> pd.DataFrame:
    raw = fetch_census_estimates(config)
    out = derive_census_fields(raw, counties)
    logger.info(f"Census: {len(out)} counties, {int(out[CENSUS_FIELDS].isna().any(axis=1).sum())} with missing fields")
    return out
