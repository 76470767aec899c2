"""
County mortality and beneficiary demographics from synthetic Medicare claims.

Claims carry an SSA state+county code; the crosswalk resolves it to FIPS.
Race codes: 1 white, 2 black, 3 other, 5 hispanic. Sex codes: 1 male, 2 female.
"""

import logging

import pandas as pd

from src.configs.settings import StudyConfig
from src.imputation import StateMedianFill, add_missing_counties
from src.table_builder.reader import read

logger = logging.getLogger(__name__)

OUTCOME_FIELDS = [
    "cms_mortality_pct",
    "cms_white_pct",
    "cms_black_pct",
    "cms_others_pct",
    "cms_hispanic_pct",
    "cms_female_pct",
]

RACE_CODES = {
    "cms_white_pct": 1,
    "cms_black_pct": 2,
    "cms_others_pct": 3,
    "cms_hispanic_pct": 5,
}
FEMALE_CODE = 2


def _parse_dates(values: pd.Series) -> pd.Series:
    """Dates stored as YYYYMMDD numbers or as date/strings."""
    if pd.api.types.is_datetime64_any_dtype(values):
        return values
    if pd.api.types.is_numeric_dtype(values):
        values = pd.to_numeric(values, errors="coerce").round().astype("Int64").astype("string")
    return pd.to_datetime(values, format="%Y%m%d", errors="coerce")


def read_claims(config: StudyConfig) -> pd.DataFrame:
    """Beneficiary records of the config.year partition, one row per beneficiary."""
    claims = read("synthetic_claims", config)
    before = len(claims)
    claims = claims.drop_duplicates(subset=["bene_id"], keep="first").reset_index(drop=True)
    if len(claims) != before:
        logger.warning(f"Dropped {before - len(claims)} duplicate beneficiary rows")
    claims["death_date"] = _parse_dates(claims["death_date"])
    logger.info(f"Claims {config.year}: {len(claims)} beneficiaries")
    return claims


def read_crosswalk(config: StudyConfig) -> pd.DataFrame:
    """SSA county code -> FIPS."""
    xwalk = read("ssa_fips_crosswalk", config).dropna(subset=["legacy_code", "fips"])
    xwalk["legacy_code"] = xwalk["legacy_code"].astype(str).str.zfill(5)
    xwalk["fips"] = xwalk["fips"].astype(str).str.zfill(5)
    return xwalk.drop_duplicates(subset=["legacy_code"], keep="first").reset_index(drop=True)


def aggregate_claims(claims: pd.DataFrame, crosswalk: pd.DataFrame, year: int) -> pd.DataFrame:
    """Per-FIPS percentages (0-100) of deaths in year and of each demographic group.

    Claims whose legacy code has no crosswalk entry are dropped.
    """
    merged = claims.merge(crosswalk[["legacy_code", "fips"]], on="legacy_code", how="inner")
    dropped = len(claims) - len(merged)
    if dropped:
        logger.info(f"{dropped} claims rows have no crosswalk entry; dropped")

    race = pd.to_numeric(merged["race"], errors="coerce")
    sex = pd.to_numeric(merged["sex"], errors="coerce")
    df = pd.DataFrame({"fips": merged["fips"]})
    df["cms_mortality_pct"] = (merged["death_date"].dt.year == year).astype("float64")
    for field, code in RACE_CODES.items():
        df[field] = (race == code).astype("float64")
    df["cms_female_pct"] = (sex == FEMALE_CODE).astype("float64")

    out = df.groupby("fips", as_index=False)[OUTCOME_FIELDS].mean()
    out[OUTCOME_FIELDS] = out[OUTCOME_FIELDS] * 100
    return out


def load_outcome(config: StudyConfig, universe: pd.DataFrame) -> pd.DataFrame:
    """County outcome fields; counties without claims take the same-state median."""
    summary = aggregate_claims(read_claims(config), read_crosswalk(config), config.year)
    summary = summary[summary["fips"].isin(universe["fips"])]
    logger.info(f"Outcome: {len(summary)} of {len(universe)} counties with claims")
    table = add_missing_counties(summary, universe)
    table = StateMedianFill(OUTCOME_FIELDS).fill(table)
    return table[["fips", *OUTCOME_FIELDS]].sort_values("fips").reset_index(drop=True)
