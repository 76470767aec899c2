"""
Strategies for filling county values that a source does not provide.

- NeighborMeanFill: mean of a hand-picked list of neighbor counties (census)
- StateMedianFill: median over the other counties of the same state (claims)
- StateNormalSampleFill: one draw from Normal(mean, sd) of the same state (survey)
- ContainmentCopyFill: copy of the surrounding county's record (climate)
"""

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

KEY_COL = "fips"


def _state_of(fips: pd.Series) -> pd.Series:
    return fips.astype(str).str[:2]


def add_missing_counties(table: pd.DataFrame, universe: pd.DataFrame, key: str = KEY_COL) -> pd.DataFrame:
    """Append empty rows for universe counties absent from table."""
    missing = universe.loc[~universe[key].isin(table[key]), [key]]
    if missing.empty:
        return table.reset_index(drop=True)
    logger.info(f"Adding {len(missing)} counties with no source rows")
    return pd.concat([table, missing], ignore_index=True)


class FillStrategy:
    """Fill missing county values in a table keyed by 5-digit FIPS."""

    name = "base"

    def __init__(self, key: str = KEY_COL):
        self.key = key

    def fill(self, table: pd.DataFrame) -> pd.DataFrame:
        raise NotImplementedError


class NeighborMeanFill(FillStrategy):
    """Overwrite target counties' fields with the mean of named neighbors' values."""

    name = "neighbor_mean"

    def __init__(self, neighbors: dict, fields: list[str], floor_fields: list[str] | None = None, key: str = KEY_COL):
        super().__init__(key)
        self.neighbors = neighbors
        self.fields = fields
        self.floor_fields = floor_fields or []

    def fill(self, table: pd.DataFrame) -> pd.DataFrame:
        out = table.copy()
        for target, sources in self.neighbors.items():
            is_target = out[self.key] == target
            if not is_target.any():
                logger.warning(f"{self.name}: target county {target} not in table; skipping")
                continue
            src = out[out[self.key].isin(sources)]
            if len(src) != len(sources):
                found = set(src[self.key])
                logger.warning(f"{self.name}: neighbors missing for {target}: {sorted(set(sources) - found)}")
            means = src[self.fields].astype("float64").mean()
            for f in self.floor_fields:
                means[f] = np.floor(means[f])
            out.loc[is_target, self.fields] = means[self.fields].to_numpy()
            logger.info(f"{self.name}: filled {target} from {len(src)} neighbors")
        return out


class StateMedianFill(FillStrategy):
    """Fill each missing field with the median of that field over same-state counties."""

    name = "state_median"

    def __init__(self, fields: list[str], key: str = KEY_COL):
        super().__init__(key)
        self.fields = fields

    def fill(self, table: pd.DataFrame) -> pd.DataFrame:
        out = table.copy()
        state = _state_of(out[self.key])
        for f in self.fields:
            values = out[f].astype("float64")
            missing = values.isna()
            if not missing.any():
                continue
            # Missing rows are NaN, so the state median is over the other counties only
            medians = values.groupby(state).transform("median")
            out[f] = values.where(~missing, medians)
            logger.info(f"{self.name}: {f}: filled {int(missing.sum() - out[f].isna().sum())} of {int(missing.sum())}")
        return out


class StateNormalSampleFill(FillStrategy):
    """Fill each missing field with one draw from Normal(mean, sd) of observed same-state counties.

    States with fewer than two observed counties have no sd estimate; their
    missing values are left missing.
    """

    name = "state_normal_sample"

    def __init__(self, fields: list[str], rng: np.random.Generator | None = None, key: str = KEY_COL):
        super().__init__(key)
        self.fields = fields
        self.rng = rng if rng is not None else np.random.default_rng()

    def fill(self, table: pd.DataFrame) -> pd.DataFrame:
        out = table.sort_values(self.key).reset_index(drop=True)
        state = _state_of(out[self.key])
        for f in self.fields:
            values = out[f].astype("float64")
            missing = values.isna()
            if not missing.any():
                continue
            grp = values.groupby(state)
            mean = grp.transform("mean")
            sd = grp.transform("std")  # ddof=1, NaN below two observations
            count = grp.transform("count")
            drawable = missing & (count >= 2)
            if (missing & ~drawable).any():
                states = sorted(set(state[missing & ~drawable]))
                logger.warning(f"{self.name}: {f}: fewer than 2 observed counties in states {states}; left missing")
            draws = self.rng.normal(loc=mean[drawable].to_numpy(), scale=sd[drawable].to_numpy())
            values.loc[drawable] = draws
            out[f] = values
            logger.info(f"{self.name}: {f}: drew {int(drawable.sum())} values")
        return out


class ContainmentCopyFill(FillStrategy):
    """Add a copy of the containing county's record under each contained county's FIPS."""

    name = "containment_copy"

    def __init__(self, containing: dict, key: str = KEY_COL):
        super().__init__(key)
        self.containing = containing

    def fill(self, table: pd.DataFrame) -> pd.DataFrame:
        present = set(table[self.key])
        new_rows = []
        for target, source in self.containing.items():
            if target in present:
                logger.warning(f"{self.name}: {target} already has a record; not overwritten")
                continue
            row = table[table[self.key] == source]
            if row.empty:
                logger.warning(f"{self.name}: containing county {source} missing; {target} stays missing")
                continue
            row = row.copy()
            row[self.key] = target
            if "state_fips" in row.columns:
                row["state_fips"] = target[:2]
            new_rows.append(row)
        if not new_rows:
            return table.copy()
        logger.info(f"{self.name}: added {len(new_rows)} records")
        return pd.concat([table, *new_rows], ignore_index=True)
