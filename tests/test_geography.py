"""Tests for src.loaders.geography."""

import sys
from pathlib import Path

import geopandas as gpd
import pytest
from shapely.geometry import box

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.configs.regions import EXCLUDED_STATE_FIPS, STATE_FIPS_TO_POSTAL
from src.configs.settings import StudyConfig
from src.loaders.geography import prepare_counties, read_counties, county_universe


def _gdf(fips_list):
    return gpd.GeoDataFrame(
        {
            "fips": fips_list,
            "county_name": [f"c{i}" for i in range(len(fips_list))],
            "area_sqmi": [10.0] * len(fips_list),
        },
        geometry=[box(i, 0, i + 1, 1) for i in range(len(fips_list))],
        crs="EPSG:4326",
    )


def test_prepare_counties_drops_excluded_states():
    out = prepare_counties(_gdf(["01001", "02013", "15001", "72001", "78010", "11001"]))
    assert out["fips"].tolist() == ["01001", "11001"]
    assert not out["state_fips"].isin(EXCLUDED_STATE_FIPS).any()


def test_prepare_counties_pads_fips():
    out = prepare_counties(_gdf(["1001"]))
    assert out["fips"].tolist() == ["01001"]
    assert out["state_fips"].tolist() == ["01"]


def test_prepare_counties_duplicate_raises():
    with pytest.raises(ValueError, match="Duplicate county FIPS"):
        prepare_counties(_gdf(["01001", "01001"]))


def test_prepare_counties_malformed_raises():
    with pytest.raises(ValueError, match="Malformed FIPS"):
        prepare_counties(_gdf(["01A01"]))


def test_prepare_counties_reprojects():
    gdf = _gdf(["01001"]).to_crs("EPSG:5070")
    out = prepare_counties(gdf, crs="EPSG:4326")
    assert out.crs.to_epsg() == 4326


def test_read_counties_from_shapefile(synthetic_config):
    counties = read_counties(synthetic_config)
    assert counties["fips"].tolist() == ["08001", "08003", "08005"]
    assert counties["fips"].is_unique
    assert counties["fips"].str.len().eq(5).all()
    assert counties["area_sqmi"].tolist() == [1000.0, 1000.0, 1000.0]
    assert set(counties.columns) == {"fips", "state_fips", "county_name", "area_sqmi", "geometry"}


def test_county_universe_has_retained_states(synthetic_config):
    universe = county_universe(read_counties(synthetic_config))
    assert list(universe.columns) == ["fips", "state_fips"]
    assert universe["state_fips"].isin(STATE_FIPS_TO_POSTAL).all()


def test_read_counties_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_counties(StudyConfig(input_root=tmp_path))
