"""
Run configuration for the study table pipeline.

Environment variables (optionally from a .env file):
- CENSUS_API_KEY: Census API credential
- STUDY_INPUT_ROOT: root directory holding every raw input
- STUDY_CACHE_DIR: on-disk memoization directory (unset disables caching)
- STUDY_SEED: seed for the survey normal-draw imputation
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from src.configs.sources import STUDY_SOURCES

DEFAULT_YEAR = 2010


@dataclass(frozen=True)
class StudyConfig:
    input_root: Path
    census_api_key: str | None = None
    year: int = DEFAULT_YEAR
    cache_dir: Path | None = None
    seed: int | None = None
    sources: dict = field(default_factory=lambda: STUDY_SOURCES)

    @property
    def prior_year(self) -> int:
        return self.year - 1

    @classmethod
    def from_env(cls, **overrides) -> "StudyConfig":
        """Build a config from the environment; keyword overrides win when not None."""
        load_dotenv()
        seed = os.getenv("STUDY_SEED")
        cache_dir = os.getenv("STUDY_CACHE_DIR")
        values = {
            "input_root": Path(os.getenv("STUDY_INPUT_ROOT", "data/raw_data")),
            "census_api_key": os.getenv("CENSUS_API_KEY"),
            "cache_dir": Path(cache_dir) if cache_dir else None,
            "seed": int(seed) if seed else None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        values["input_root"] = Path(values["input_root"])
        if values.get("cache_dir") is not None:
            values["cache_dir"] = Path(values["cache_dir"])
        return cls(**values)

    def source(self, name: str) -> dict:
        if name not in self.sources:
            raise KeyError(f"Unknown table '{name}'. Available: {list(self.sources)}")
        return self.sources[name]

    def resolve(self, path_template: str, year: int | None = None) -> Path:
        """Fill {year}/{prior_year} into a source path and resolve it against input_root."""
        year = self.year if year is None else year
        p = Path(path_template.format(year=year, prior_year=year - 1))
        if not p.is_absolute():
            return self.input_root / p
        return p
