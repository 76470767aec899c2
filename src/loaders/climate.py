"""
County climate fields from gridMET daily NetCDF rasters.

For each variable the per-cell mean over a date window is computed, then
cells are assigned to the county polygon containing their centroid and
averaged. Windows:
- annual: Jan 1 - Dec 31 of the study year
- summer: Jun 1 - Aug 31 of the study year
- winter: Dec 1 of the prior year - last day of February of the study year
"""

import logging
from pathlib import Path

import geopandas as gpd
import netCDF4
import numpy as np
import pandas as pd

from src.configs.corrections import VIRGINIA_CONTAINING_COUNTY
from src.configs.settings import StudyConfig
from src.imputation import ContainmentCopyFill

logger = logging.getLogger(__name__)

CLIMATE_VARIABLES = ["tmmx", "rmax", "sph"]


def climate_fields(variables: list[str] = CLIMATE_VARIABLES) -> list[str]:
    fields = []
    for v in variables:
        fields += [f"gmet_mean_{v}", f"gmet_mean_summer_{v}", f"gmet_mean_winter_{v}"]
    return fields


def season_windows(year: int) -> dict[str, list[tuple[int, pd.Timestamp, pd.Timestamp]]]:
    """Window name -> list of (file year, start, end) pieces."""
    feb_end = pd.Timestamp(year, 3, 1) - pd.Timedelta(days=1)
    return {
        "annual": [(year, pd.Timestamp(year, 1, 1), pd.Timestamp(year, 12, 31))],
        "summer": [(year, pd.Timestamp(year, 6, 1), pd.Timestamp(year, 8, 31))],
        "winter": [
            (year - 1, pd.Timestamp(year - 1, 12, 1), pd.Timestamp(year - 1, 12, 31)),
            (year, pd.Timestamp(year, 1, 1), feb_end),
        ],
    }


def _read_dates(ds: netCDF4.Dataset, time_dim: str) -> pd.DatetimeIndex:
    times = ds.variables[time_dim]
    dates = netCDF4.num2date(
        times[:],
        units=times.units,
        calendar=getattr(times, "calendar", "standard"),
        only_use_cftime_datetimes=False,
        only_use_python_datetimes=True,
    )
    return pd.DatetimeIndex(dates).normalize()


def read_grid(path: Path, lat_dim: str = "lat", lon_dim: str = "lon") -> tuple[np.ndarray, np.ndarray]:
    """Latitude and longitude axes of a gridded file."""
    with netCDF4.Dataset(path) as ds:
        return np.asarray(ds.variables[lat_dim][:]), np.asarray(ds.variables[lon_dim][:])


def window_sums(
    path: Path,
    variable: str,
    start: pd.Timestamp,
    end: pd.Timestamp,
    time_dim: str = "day",
    chunk_days: int = 31,
) -> tuple[np.ndarray, np.ndarray]:
    """Per-cell sum and count of valid daily values between start and end (inclusive).

    The variable must be laid out (time, lat, lon). Masked values are skipped.
    """
    with netCDF4.Dataset(path) as ds:
        var = ds.variables[variable]
        if var.dimensions[0] != time_dim:
            raise ValueError(f"{path.name}: expected '{time_dim}' as first dimension of {variable}, got {var.dimensions}")
        dates = _read_dates(ds, time_dim)
        idx = np.flatnonzero((dates >= start) & (dates <= end))
        total = np.zeros(var.shape[1:], dtype="float64")
        count = np.zeros(var.shape[1:], dtype="int64")
        if len(idx) == 0:
            logger.warning(f"{path.name}: no days between {start.date()} and {end.date()}")
            return total, count
        for i in range(0, len(idx), chunk_days):
            sel = idx[i:i + chunk_days]
            block = var[sel[0]:sel[-1] + 1][sel - sel[0]]
            block = np.ma.filled(block.astype("float64"), np.nan)
            total += np.nansum(block, axis=0)
            count += np.sum(~np.isnan(block), axis=0)
    return total, count


def window_mean(pieces: list[tuple[Path, pd.Timestamp, pd.Timestamp]], variable: str, **kwargs) -> np.ndarray:
    """Per-cell mean over one or more (file, start, end) pieces, pooled by day."""
    total = count = None
    for path, start, end in pieces:
        s, c = window_sums(path, variable, start, end, **kwargs)
        total = s if total is None else total + s
        count = c if count is None else count + c
    with np.errstate(invalid="ignore", divide="ignore"):
        return np.where(count > 0, total / np.maximum(count, 1), np.nan)


def cell_county_index(lat: np.ndarray, lon: np.ndarray, counties: gpd.GeoDataFrame) -> pd.DataFrame:
    """Map flat cell index (row-major over lat x lon) to the county containing the cell centroid."""
    lon2d, lat2d = np.meshgrid(lon, lat)
    cells = gpd.GeoDataFrame(
        {"cell": np.arange(lat2d.size)},
        geometry=gpd.points_from_xy(lon2d.ravel(), lat2d.ravel()),
        crs="EPSG:4326",
    )
    if counties.crs is not None and counties.crs != cells.crs:
        cells = cells.to_crs(counties.crs)
    joined = gpd.sjoin(cells, counties[["fips", "geometry"]], predicate="within", how="inner")
    logger.info(f"{len(joined)} of {len(cells)} grid cells fall inside a county")
    return pd.DataFrame(joined[["cell", "fips"]]).reset_index(drop=True)


def aggregate_cells_to_counties(grids: dict[str, np.ndarray], index: pd.DataFrame, agg: str = "mean") -> pd.DataFrame:
    """Aggregate named 2-D cell grids to counties using a cell_county_index mapping."""
    df = pd.DataFrame({"fips": index["fips"].to_numpy()})
    for name, grid in grids.items():
        df[name] = grid.ravel()[index["cell"].to_numpy()]
    return df.groupby("fips", as_index=False)[list(grids)].agg(agg)


def load_climate(config: StudyConfig, counties: gpd.GeoDataFrame) -> pd.DataFrame:
    """Nine gridMET county fields plus the Virginia containment correction."""
    spec = config.source("gridmet")
    time_dim = spec.get("time_dim", "day")
    read_kw = {"time_dim": time_dim, "chunk_days": spec.get("chunk_days", 31)}
    windows = season_windows(config.year)

    index = None
    grid_shape = None
    out = None
    for name, vspec in spec["variables"].items():
        paths = {y: config.resolve(vspec["path"], year=y) for y in (config.prior_year, config.year)}
        for p in paths.values():
            if not p.exists():
                raise FileNotFoundError(f"Data not found: {p}")

        lat, lon = read_grid(paths[config.year], spec.get("lat_dim", "lat"), spec.get("lon_dim", "lon"))
        if index is None or grid_shape != (len(lat), len(lon)):
            index = cell_county_index(lat, lon, counties)
            grid_shape = (len(lat), len(lon))

        grids = {}
        for window, pieces in windows.items():
            resolved = [(paths[y], start, end) for y, start, end in pieces]
            field = f"gmet_mean_{name}" if window == "annual" else f"gmet_mean_{window}_{name}"
            grids[field] = window_mean(resolved, vspec["variable"], **read_kw)
        agg = aggregate_cells_to_counties(grids, index)
        logger.info(f"gridMET {name}: {len(agg)} counties")
        out = agg if out is None else out.merge(agg, on="fips", how="outer")

    out = ContainmentCopyFill(VIRGINIA_CONTAINING_COUNTY).fill(out)
    fields = [c for c in climate_fields(list(spec["variables"])) if c in out.columns]
    return out[["fips", *fields]].sort_values("fips").reset_index(drop=True)
