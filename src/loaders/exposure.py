"""
Annual PM2.5 exposure: gridded point estimates averaged within county polygons.

Counties with no grid point inside them get no row; they are reported as
coverage gaps and never imputed.
"""

import logging

import geopandas as gpd
import pandas as pd

from src.configs.regions import EXCLUDED_STATE_FIPS
from src.configs.settings import StudyConfig
from src.table_builder.reader import read

logger = logging.getLogger(__name__)

EXPOSURE_FIELD = "qd_mean_pm25"


def read_exposure_points(config: StudyConfig) -> pd.DataFrame:
    """Grid values for config.year joined to site coordinates by site code."""
    values = read("pm25_grid", config)
    sites = read("pm25_sites", config)
    points = values.merge(sites, on="site_code", how="inner")
    dropped = len(values) - len(points)
    if dropped:
        logger.warning(f"{dropped} grid values have no site coordinates; dropped")
    logger.info(f"PM2.5 grid: {len(points)} points with coordinates")
    return points


def points_to_geodataframe(df: pd.DataFrame, lon: str = "lon", lat: str = "lat", crs: str = "EPSG:4326") -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame(df, geometry=gpd.points_from_xy(df[lon], df[lat]), crs=crs)


def aggregate_points_to_counties(
    points: gpd.GeoDataFrame,
    counties: gpd.GeoDataFrame,
    value_cols: list[str],
    agg: str = "mean",
) -> pd.DataFrame:
    """Point-in-polygon join of points to counties, then per-county aggregation.

    Args:
        points: Point GeoDataFrame carrying value_cols.
        counties: County polygons with fips.
        value_cols: Columns aggregated per county.
        agg: Aggregation function name.

    Returns:
        DataFrame with fips + value_cols, one row per county containing at least one point.
    """
    if points.crs is not None and counties.crs is not None and points.crs != counties.crs:
        points = points.to_crs(counties.crs)
    joined = gpd.sjoin(points, counties[["fips", "geometry"]], predicate="within", how="inner")
    joined = joined[~joined["fips"].str[:2].isin(EXCLUDED_STATE_FIPS)]
    logger.info(f"{len(joined)} of {len(points)} points fall inside a county")
    out = joined.groupby("fips", as_index=False)[value_cols].agg(agg)
    return pd.DataFrame(out)


def load_exposure(config: StudyConfig, counties: gpd.GeoDataFrame) -> pd.DataFrame:
    """County mean annual PM2.5 (qd_mean_pm25)."""
    points = points_to_geodataframe(read_exposure_points(config))
    out = aggregate_points_to_counties(points, counties, ["pm25"])
    out = out.rename(columns={"pm25": EXPOSURE_FIELD})
    logger.info(f"Exposure: {len(out)} of {len(counties)} counties covered")
    return out
