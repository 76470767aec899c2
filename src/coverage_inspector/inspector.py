"""Coverage and missingness of stage tables against the county universe."""

import pandas as pd

KEY_COL = "fips"


def missing_counties(table: pd.DataFrame, universe: pd.DataFrame, key: str = KEY_COL) -> list[str]:
    """Universe counties with no row in table."""
    return sorted(set(universe[key]) - set(table[key]))


def missing_value_counts(table: pd.DataFrame) -> pd.DataFrame:
    """Missing count and percentage per column."""
    n = len(table)
    missing = table.isna().sum()
    return pd.DataFrame({
        "column": missing.index,
        "missing": missing.to_numpy(),
        "pct": (100.0 * missing / n).to_numpy() if n else 0.0,
    })


def coverage_report(tables: dict[str, pd.DataFrame], universe: pd.DataFrame, key: str = KEY_COL) -> pd.DataFrame:
    """One row per table: rows, universe counties covered (any non-missing value) and missing."""
    rows = []
    universe_keys = set(universe[key])
    for name, df in tables.items():
        value_cols = [c for c in df.columns if c != key]
        has_value = df[value_cols].notna().any(axis=1) if value_cols else pd.Series(True, index=df.index)
        covered = set(df.loc[has_value, key]) & universe_keys
        rows.append({
            "table": name,
            "rows": len(df),
            "universe_size": len(universe_keys),
            "counties_covered": len(covered),
            "counties_missing": len(universe_keys - covered),
            "coverage": len(covered) / len(universe_keys) if universe_keys else 0.0,
        })
    return pd.DataFrame(rows)
