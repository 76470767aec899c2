"""
County boundaries: the reference universe of contiguous-US counties.

Every other source's coverage is measured against the FIPS set produced here.
"""

import logging

import geopandas as gpd
import pandas as pd

from src.configs.regions import EXCLUDED_STATE_FIPS
from src.configs.settings import StudyConfig
from src.table_builder.reader import read

logger = logging.getLogger(__name__)

EXPECTED_UNIVERSE_SIZE = 3109  # 2010 boundaries, contiguous US + DC
COUNTY_COLUMNS = ["fips", "state_fips", "county_name", "area_sqmi", "geometry"]


def prepare_counties(gdf: gpd.GeoDataFrame, crs: str | None = "EPSG:4326") -> gpd.GeoDataFrame:
    """Filter to the contiguous US and validate FIPS.

    Args:
        gdf: Boundaries with canonical columns (fips, county_name, area_sqmi, geometry).
        crs: Target CRS for point-in-polygon joins; None keeps the input CRS.

    Returns:
        GeoDataFrame with one row per county, sorted by fips.
    """
    gdf = gdf.copy()
    gdf["fips"] = gdf["fips"].astype(str).str.zfill(5)
    gdf["state_fips"] = gdf["fips"].str[:2]
    before = len(gdf)
    gdf = gdf[~gdf["state_fips"].isin(EXCLUDED_STATE_FIPS)]
    logger.info(f"Dropped {before - len(gdf)} polygons outside the contiguous US")

    bad = ~gdf["fips"].str.fullmatch(r"\d{5}")
    if bad.any():
        raise ValueError(f"Malformed FIPS codes: {gdf.loc[bad, 'fips'].tolist()[:10]}")
    dup = gdf["fips"].duplicated(keep=False)
    if dup.any():
        raise ValueError(f"Duplicate county FIPS: {sorted(set(gdf.loc[dup, 'fips']))[:10]}")

    if crs is not None and gdf.crs is not None and gdf.crs != crs:
        gdf = gdf.to_crs(crs)
    gdf["area_sqmi"] = pd.to_numeric(gdf["area_sqmi"], errors="coerce")
    cols = [c for c in COUNTY_COLUMNS if c in gdf.columns]
    return gdf[cols].sort_values("fips").reset_index(drop=True)


def read_counties(config: StudyConfig) -> gpd.GeoDataFrame:
    """Read the county boundary shapefile and build the study universe."""
    gdf = read("counties", config)
    counties = prepare_counties(gdf, crs=config.source("counties").get("crs"))
    if len(counties) != EXPECTED_UNIVERSE_SIZE:
        logger.warning(f"County universe has {len(counties)} counties (expected {EXPECTED_UNIVERSE_SIZE})")
    else:
        logger.info(f"County universe: {len(counties)} counties")
    return counties


def county_universe(counties: gpd.GeoDataFrame) -> pd.DataFrame:
    """Plain (fips, state_fips) table of the universe, without geometry."""
    return pd.DataFrame(counties[["fips", "state_fips"]]).reset_index(drop=True)
