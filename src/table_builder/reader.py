"""
Generic reader: load any file-backed table from STUDY_SOURCES into a DataFrame.

Single entry point for all file formats (csv, parquet, xport, fwf, shapefile).
Handles read_dtypes, combine_columns, rename/select and special_values.
"""

from pathlib import Path

import geopandas as gpd
import pandas as pd

from src.configs.settings import StudyConfig

_DTYPE_MAP = {"string": "string", "str": "string", "float64": "float64", "float": "float64", "int64": "Int64"}


def _parse_read_dtypes(read_dtypes: dict) -> dict:
    """Convert schema dtype names to pandas dtypes."""
    return {col: _DTYPE_MAP.get(dtype, dtype) for col, dtype in read_dtypes.items()}


def _read_file(path: Path, spec: dict, year: int | None = None) -> pd.DataFrame:
    fmt = spec.get("format", "csv").lower()
    dtypes = _parse_read_dtypes(spec.get("read_dtypes", {}))
    if fmt == "csv":
        return pd.read_csv(path, dtype=dtypes or None, low_memory=False)
    if fmt == "parquet":
        kwargs = {}
        if spec.get("partition") and year is not None:
            kwargs["filters"] = [(spec["partition"], "==", year)]
        df = pd.read_parquet(path, engine="pyarrow", **kwargs)
    elif fmt == "xport":
        df = pd.read_sas(path, format="xport", encoding=spec.get("encoding", "latin1"))
        df.columns = df.columns.str.upper()
    elif fmt == "fwf":
        if "colspecs" not in spec:
            raise ValueError(f"Fixed-width source needs 'colspecs': {path}")
        df = pd.read_fwf(path, colspecs=spec["colspecs"], names=spec["names"], header=None)
    elif fmt == "shapefile":
        df = gpd.read_file(path)
    else:
        raise ValueError(f"Unsupported format: {fmt}")
    for col, dtype in dtypes.items():
        if col in df.columns:
            df[col] = df[col].astype(dtype)
    return df


def _apply_combine_columns(df: pd.DataFrame, combine_config: dict) -> pd.DataFrame:
    df = df.copy()
    for out_col, spec in combine_config.items():
        from_cols = spec["from"]
        method = spec.get("method", "concat")
        zfill_list = spec.get("zfill", [2, 3])
        if method == "concat_zfill":
            parts = [
                df[c].astype(str).str.replace(r"\.0$", "", regex=True).str.zfill(
                    zfill_list[i] if i < len(zfill_list) else 0
                )
                for i, c in enumerate(from_cols)
            ]
        else:
            parts = [df[c].astype(str) for c in from_cols]
        df[out_col] = parts[0]
        for part in parts[1:]:
            df[out_col] = df[out_col] + part
        if spec.get("dtype"):
            df[out_col] = df[out_col].astype(spec["dtype"])
    return df


def _rename_and_select(df: pd.DataFrame, keys: dict, value_columns: dict) -> pd.DataFrame:
    rename = {}
    if keys:
        rename.update({v: k for k, v in keys.items()})
    if value_columns:
        rename.update({v: k for k, v in value_columns.items()})
    df = df.rename(columns=rename)
    keep = list((keys or {}).keys()) + list((value_columns or {}).keys())
    keep = [c for c in dict.fromkeys(keep) if c in df.columns]
    return df[keep].copy()


def _apply_special_values(df: pd.DataFrame, special_values: dict) -> pd.DataFrame:
    """Replace codebook sentinels per canonical column (replace_with None means missing)."""
    df = df.copy()
    for col, codes in special_values.items():
        if col not in df.columns:
            continue
        for raw_val, spec in codes.items():
            replace_with = spec.get("replace_with")
            mask = df[col] == raw_val
            if replace_with is None:
                df[col] = df[col].mask(mask)
            else:
                df.loc[mask, col] = replace_with
    return df


def read(table_name: str, config: StudyConfig, year: int | None = None) -> pd.DataFrame:
    """Load a single file-backed table from the config's sources into a DataFrame.

    Args:
        table_name: Key in config.sources (e.g. 'counties', 'pm25_grid', 'brfss').
        config: Run configuration; input_root resolves relative paths.
        year: Year substituted into the path template (default: config.year).

    Returns:
        DataFrame (GeoDataFrame for shapefiles) with canonical column names.
    """
    spec = config.source(table_name)
    if "path" not in spec:
        raise ValueError(f"Table '{table_name}' is not file-backed (format={spec.get('format')})")
    year = config.year if year is None else year
    path = config.resolve(spec["path"], year=year)
    if not path.exists():
        raise FileNotFoundError(f"Data not found: {path}")
    df = _read_file(path, spec, year=year)

    if "combine_columns" in spec:
        df = _apply_combine_columns(df, spec["combine_columns"])
    df = _rename_and_select(df, spec.get("keys", {}), spec.get("value_columns", {}))
    if "special_values" in spec:
        df = _apply_special_values(df, spec["special_values"])
    return df.reset_index(drop=True)
