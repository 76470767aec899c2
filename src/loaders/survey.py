"""
County BMI and smoking prevalence from the BRFSS respondent extract.

Smoking status (_SMOKER3) codes:
  1 current smoker, every day
  2 current smoker, some days
  3 former smoker
  4 never smoked
  9 don't know / refused / not asked

The five categories partition respondents with a status code, so a
county's five percentages add to 100.
"""

import logging

import numpy as np
import pandas as pd

from src.configs.settings import StudyConfig
from src.imputation import StateNormalSampleFill, add_missing_counties
from src.table_builder.reader import read

logger = logging.getLogger(__name__)

SURVEY_FIELDS = [
    "cdc_mean_bmi",
    "cdc_pct_cusmoker",
    "cdc_pct_sdsmoker",
    "cdc_pct_fmsmoker",
    "cdc_pct_nvsmoker",
    "cdc_pct_nnsmoker",
]

SMOKING_CATEGORIES = {
    "cdc_pct_cusmoker": [1],
    "cdc_pct_sdsmoker": [2],
    "cdc_pct_fmsmoker": [3],
    "cdc_pct_nvsmoker": [4],
    "cdc_pct_nnsmoker": [9],
}


def _code_to_str(values: pd.Series, width: int) -> pd.Series:
    """Numeric survey codes (read as float) to zero-padded strings; missing stays missing."""
    codes = pd.to_numeric(values, errors="coerce").round().astype("Int64")
    return codes.astype("string").str.zfill(width)


def read_survey(config: StudyConfig) -> pd.DataFrame:
    """Respondent records with fips, bmi and smoker_status; respondents without a county are dropped."""
    records = read("brfss", config)
    records["fips"] = _code_to_str(records["state_fips"], 2) + _code_to_str(records["county_code"], 3)
    before = len(records)
    records = records[records["fips"].notna()].reset_index(drop=True)
    logger.info(f"BRFSS: {len(records)} of {before} respondents have a county code")
    return records[["fips", "bmi", "smoker_status"]]


def summarize_survey(records: pd.DataFrame, bmi_scale: float = 100.0) -> pd.DataFrame:
    """Per-county mean BMI and smoking-category percentages.

    Percentages (0-100) are over respondents with a smoking status code;
    missing BMI values are excluded from the mean.
    """
    df = pd.DataFrame({"fips": records["fips"].astype(str)})
    df["cdc_mean_bmi"] = pd.to_numeric(records["bmi"], errors="coerce") / bmi_scale
    status = pd.to_numeric(records["smoker_status"], errors="coerce")
    coded = status.notna()
    for field, codes in SMOKING_CATEGORIES.items():
        df[field] = status.isin(codes).astype("float64").where(coded) * 100
    out = df.groupby("fips", as_index=False)[SURVEY_FIELDS].mean()
    return out


def load_survey(config: StudyConfig, universe: pd.DataFrame, rng: np.random.Generator | None = None) -> pd.DataFrame:
    """County survey fields with missing counties drawn from the same-state normal distribution."""
    records = read_survey(config)
    summary = summarize_survey(records, config.source("brfss").get("bmi_scale", 100.0))
    summary = summary[summary["fips"].isin(universe["fips"])]
    logger.info(f"Survey: {len(summary)} of {len(universe)} counties observed")

    table = add_missing_counties(summary, universe)
    rng = rng if rng is not None else np.random.default_rng(config.seed)
    table = StateNormalSampleFill(SURVEY_FIELDS, rng=rng).fill(table)
    return table[["fips", *SURVEY_FIELDS]]
