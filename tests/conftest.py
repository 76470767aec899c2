"""Synthetic inputs: one 3-county state (08) plus an Alaska polygon that must be dropped."""

import copy
import sys
from pathlib import Path

import geopandas as gpd
import netCDF4
import numpy as np
import pandas as pd
import pytest
from shapely.geometry import box

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.configs.census_variables import CENSUS_VARIABLE_GROUPS
from src.configs.settings import StudyConfig
from src.configs.sources import STUDY_SOURCES

STATE = "08"
COUNTY_BOXES = {
    "08001": box(-105, 39, -104, 40),
    "08003": box(-104, 39, -103, 40),
    "08005": box(-103, 39, -102, 40),
}
ALASKA_FIPS = "02013"


def counties_gdf() -> gpd.GeoDataFrame:
    rows = [
        {"STATE": f[:2], "COUNTY": f[2:], "NAME": f"County {f}", "CENSUSAREA": 1000.0, "geometry": g}
        for f, g in COUNTY_BOXES.items()
    ]
    rows.append({"STATE": "02", "COUNTY": "013", "NAME": "Aleutians East", "CENSUSAREA": 7000.0,
                 "geometry": box(-150, 60, -149, 61)})
    return gpd.GeoDataFrame(rows, geometry="geometry", crs="EPSG:4326")


def write_counties(root: Path) -> None:
    path = root / STUDY_SOURCES["counties"]["path"]
    path.parent.mkdir(parents=True, exist_ok=True)
    counties_gdf().to_file(path)


def write_exposure(root: Path, year: int = 2010) -> None:
    grid_path = root / STUDY_SOURCES["pm25_grid"]["path"].format(year=year)
    grid_path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame({"SiteCode": ["S1", "S2", "S3", "S4"], "pm25": [10.0, 12.0, 50.0, 7.0]}).to_csv(grid_path, index=False)
    # S3 is outside every county; S4 has no coordinates
    pd.DataFrame({
        "SiteCode": ["S1", "S2", "S3"],
        "Lon": [-104.5, -103.5, -120.0],
        "Lat": [39.5, 39.5, 30.0],
    }).to_csv(root / STUDY_SOURCES["pm25_sites"]["path"], index=False)


SURVEY_ROWS = [
    # _STATE, CTYCODE, _BMI4, _SMOKER3
    (8, 1, 2500, 1),
    (8, 1, 2700, 4),
    (8, 3, 3000, 3),
    (8, 3, 9999, 9),
    (8, 777, 2200, 1),  # county unknown: dropped
]


def survey_sources() -> dict:
    """Sources with the BRFSS extract read from CSV instead of SAS transport."""
    sources = copy.deepcopy(STUDY_SOURCES)
    sources["brfss"]["path"] = "survey/brfss_{year}.csv"
    sources["brfss"]["format"] = "csv"
    return sources


def write_survey(root: Path, year: int = 2010) -> None:
    path = root / "survey" / f"brfss_{year}.csv"
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(SURVEY_ROWS, columns=["_STATE", "CTYCODE", "_BMI4", "_SMOKER3"]).to_csv(path, index=False)


GRID_LAT = np.array([39.5])
GRID_LON = np.array([-104.5, -103.5, -102.5])


def write_gridmet_file(path: Path, variable: str, year: int, daily_values) -> None:
    """daily_values(dates) -> array (days, lat, lon)."""
    days = pd.date_range(f"{year}-01-01", f"{year}-12-31", freq="D")
    path.parent.mkdir(parents=True, exist_ok=True)
    with netCDF4.Dataset(path, "w") as ds:
        ds.createDimension("day", len(days))
        ds.createDimension("lat", len(GRID_LAT))
        ds.createDimension("lon", len(GRID_LON))
        t = ds.createVariable("day", "f8", ("day",))
        t.units = "days since 1900-01-01 00:00:00"
        t.calendar = "standard"
        t[:] = (days - pd.Timestamp("1900-01-01")).days.to_numpy()
        ds.createVariable("lat", "f8", ("lat",))[:] = GRID_LAT
        ds.createVariable("lon", "f8", ("lon",))[:] = GRID_LON
        v = ds.createVariable(variable, "f4", ("day", "lat", "lon"), fill_value=-9999.0)
        v[:] = daily_values(days)


def constant_values(per_cell):
    def _values(days):
        return np.broadcast_to(np.asarray(per_cell, dtype="float32"), (len(days), len(GRID_LAT), len(GRID_LON))).copy()
    return _values


def write_gridmet(root: Path, years=(2009, 2010)) -> None:
    base = {"tmmx": [290.0, 295.0, 300.0], "rmax": [60.0, 70.0, 80.0], "sph": [0.004, 0.005, 0.006]}
    for name, vspec in STUDY_SOURCES["gridmet"]["variables"].items():
        for year in years:
            path = root / vspec["path"].format(year=year)
            write_gridmet_file(path, vspec["variable"], year, constant_values(base[name]))


CROSSWALK = {"06010": "08001", "06020": "08003", "06030": "08005"}


def write_claims(root: Path, year: int = 2010) -> None:
    claims = pd.DataFrame({
        "DESYNPUF_ID": ["a", "b", "c", "d", "e", "f"],
        "BENE_DEATH_DT": [20100315.0, np.nan, np.nan, 20100701.0, 20100102.0, np.nan],
        "BENE_SEX_IDENT_CD": [2, 1, 2, 2, 1, 1],
        "BENE_RACE_CD": [1, 2, 1, 5, 3, 1],
        "SP_STATE_CODE": ["06", "06", "06", "06", "06", "99"],
        "BENE_COUNTY_CD": ["010", "010", "020", "020", "020", "999"],  # last row has no crosswalk entry
        "year": [year] * 6,
    })
    other_year = claims.assign(year=year - 1, BENE_COUNTY_CD="030")
    path = root / STUDY_SOURCES["synthetic_claims"]["path"]
    path.mkdir(parents=True, exist_ok=True)
    pd.concat([claims, other_year]).to_parquet(path, partition_cols=["year"], index=False)
    pd.DataFrame({"ssacounty": list(CROSSWALK), "fipscounty": list(CROSSWALK.values())}).to_csv(
        root / STUDY_SOURCES["ssa_fips_crosswalk"]["path"], index=False
    )


def census_group_values(fips: str) -> dict:
    """Group totals for the synthetic counties."""
    pop = {"08001": 5000, "08003": 20000, "08005": 800}[fips]
    return {
        "poverty_universe": 100, "below_poverty": 15,
        "race_universe": 100, "hispanic": 10, "white": 60, "black": 20, "native": 5, "asian": 3,
        "education_universe": 200, "below_highschool": 30,
        "household_income": 45000, "median_house_value": 150000,
        "total_population": pop,
    }


def census_rows(fips_list) -> dict:
    """{fips: {variable: value}}; multi-variable groups put the total in their first variable."""
    out = {}
    for fips in fips_list:
        values = {}
        for group, total in census_group_values(fips).items():
            variables = CENSUS_VARIABLE_GROUPS[group]
            values[variables[0]] = total
            for v in variables[1:]:
                values[v] = 0
        out[fips] = values
    return out


def census_api_side_effect(rows_by_fips: dict):
    """Fake requests.get for the Census API answering any chunk of variables."""
    from unittest.mock import Mock

    def _get(url, params=None, timeout=None):
        variables = params["get"].split(",")
        data = [variables + ["state", "county"]]
        for fips, values in rows_by_fips.items():
            data.append([None if values.get(v) is None else str(values[v]) for v in variables] + [fips[:2], fips[2:]])
        response = Mock()
        response.json.return_value = data
        response.raise_for_status = Mock()
        return response

    return _get


@pytest.fixture
def synthetic_root(tmp_path) -> Path:
    write_counties(tmp_path)
    write_exposure(tmp_path)
    write_survey(tmp_path)
    write_gridmet(tmp_path)
    write_claims(tmp_path)
    return tmp_path


@pytest.fixture
def synthetic_config(synthetic_root) -> StudyConfig:
    return StudyConfig(
        input_root=synthetic_root,
        census_api_key="test-key",
        seed=7,
        sources=survey_sources(),
    )


@pytest.fixture
def counties() -> gpd.GeoDataFrame:
    from src.loaders.geography import prepare_counties

    gdf = counties_gdf().rename(columns={"NAME": "county_name", "CENSUSAREA": "area_sqmi"})
    gdf["fips"] = gdf["STATE"] + gdf["COUNTY"]
    return prepare_counties(gdf.drop(columns=["STATE", "COUNTY"]))
