"""Per-source loaders producing one county-keyed table each."""

from src.loaders.geography import read_counties, prepare_counties, county_universe
from src.loaders.exposure import load_exposure
from src.loaders.census import load_census
from src.loaders.survey import load_survey
from src.loaders.climate import load_climate
from src.loaders.outcome import load_outcome

__all__ = [
    "read_counties",
    "prepare_counties",
    "county_universe",
    "load_exposure",
    "load_census",
    "load_survey",
    "load_climate",
    "load_outcome",
]
