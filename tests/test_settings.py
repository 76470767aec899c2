"""Tests for src.configs.settings."""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from src.configs.settings import StudyConfig, DEFAULT_YEAR


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("CENSUS_API_KEY", "STUDY_INPUT_ROOT", "STUDY_CACHE_DIR", "STUDY_SEED"):
        monkeypatch.delenv(name, raising=False)
    # keep a developer's .env out of the tests
    monkeypatch.setattr("src.configs.settings.load_dotenv", lambda: False)
    return monkeypatch


def test_from_env_defaults(clean_env):
    config = StudyConfig.from_env()
    assert config.year == DEFAULT_YEAR
    assert config.census_api_key is None
    assert config.cache_dir is None
    assert config.seed is None
    assert config.input_root == Path("data/raw_data")


def test_from_env_reads_environment(clean_env):
    clean_env.setenv("CENSUS_API_KEY", "abc")
    clean_env.setenv("STUDY_INPUT_ROOT", "/data/in")
    clean_env.setenv("STUDY_CACHE_DIR", "/tmp/cache")
    clean_env.setenv("STUDY_SEED", "42")
    config = StudyConfig.from_env()
    assert config.census_api_key == "abc"
    assert config.input_root == Path("/data/in")
    assert config.cache_dir == Path("/tmp/cache")
    assert config.seed == 42


def test_from_env_overrides_win(clean_env):
    clean_env.setenv("STUDY_INPUT_ROOT", "/data/in")
    config = StudyConfig.from_env(input_root="/other", year=2011, seed=None)
    assert config.input_root == Path("/other")
    assert config.year == 2011
    assert config.prior_year == 2010


def test_resolve_relative_and_absolute():
    config = StudyConfig(input_root=Path("/root_in"), year=2010)
    assert config.resolve("climate/tmmx_{year}.nc") == Path("/root_in/climate/tmmx_2010.nc")
    assert config.resolve("climate/tmmx_{year}.nc", year=2009) == Path("/root_in/climate/tmmx_2009.nc")
    assert config.resolve("/abs/{prior_year}.csv") == Path("/abs/2009.csv")


def test_source_unknown_raises():
    with pytest.raises(KeyError, match="Unknown table"):
        StudyConfig(input_root=Path(".")).source("nope")
