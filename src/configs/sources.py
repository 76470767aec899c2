"""
Unified source configuration for every input of the county study table.

Canonical keys (aligned across tables):
- fips: 5-digit county FIPS code (state 2 + county 3)
- state_fips: 2-digit state FIPS code
- legacy_code: 5-digit SSA state+county code (claims only; resolved to fips via crosswalk)

Paths are relative to StudyConfig.input_root and may contain {year} and
{prior_year}, which are filled in from the configured study year.
"""

STUDY_SOURCES = {
    # ---- Geography (reference universe) ----
    "counties": {
        "path": "geography/gz_2010_us_050_00_500k/gz_2010_us_050_00_500k.shp",
        "format": "shapefile",
        "read_dtypes": {
            "STATE": "string",
            "COUNTY": "string",
        },
        "combine_columns": {
            "fips": {
                "from": ["STATE", "COUNTY"],
                "method": "concat_zfill",
                "zfill": [2, 3],
                "dtype": "string",
            }
        },
        "keys": {"fips": "fips"},
        "value_columns": {
            "state_fips": "STATE",
            "county_name": "NAME",
            # Census cartographic boundary files carry land area in square miles
            "area_sqmi": "CENSUSAREA",
            "geometry": "geometry",
        },
        "crs": "EPSG:4326",
    },
    # ---- Exposure (gridded PM2.5 estimates, one file per year) ----
    "pm25_grid": {
        "path": "exposure/qd_pm25/pm25_{year}.csv",
        "format": "csv",
        "read_dtypes": {"SiteCode": "string"},
        "keys": {"site_code": "SiteCode"},
        "value_columns": {"pm25": "pm25"},
    },
    "pm25_sites": {
        "path": "exposure/qd_pm25/USGridSite.csv",
        "format": "csv",
        "read_dtypes": {"SiteCode": "string"},
        "keys": {"site_code": "SiteCode"},
        "value_columns": {"lon": "Lon", "lat": "Lat"},
    },
    # ---- Census (ACS 5-year API) ----
    "census": {
        "url": "https://api.census.gov/data/{year}/acs/acs5",
        "format": "api",
        # Census API accepts at most 50 fields per request, NAME included
        "max_fields": 49,
        "timeout": 60,
    },
    # ---- Survey (BRFSS SAS transport extract) ----
    "brfss": {
        "path": "survey/CDBRFS10.XPT",
        "format": "xport",
        "keys": {"state_fips": "_STATE", "county_code": "CTYCODE"},
        "value_columns": {"bmi": "_BMI4", "smoker_status": "_SMOKER3"},
        # Codebook sentinels: refused / don't know answers are not data
        "special_values": {
            "bmi": {9999: {"meaning": "refused", "replace_with": None}},
            "county_code": {
                777: {"meaning": "don't know / not sure", "replace_with": None},
                999: {"meaning": "refused", "replace_with": None},
            },
        },
        # _BMI4 is stored with two implied decimal places
        "bmi_scale": 100.0,
    },
    # ---- Climate (gridMET daily NetCDF, one file per variable per year) ----
    "gridmet": {
        "format": "netcdf",
        "variables": {
            "tmmx": {"path": "climate/tmmx_{year}.nc", "variable": "air_temperature"},
            "rmax": {"path": "climate/rmax_{year}.nc", "variable": "relative_humidity"},
            "sph": {"path": "climate/sph_{year}.nc", "variable": "specific_humidity"},
        },
        "time_dim": "day",
        "lat_dim": "lat",
        "lon_dim": "lon",
        # days read per chunk when averaging a window
        "chunk_days": 31,
    },
    # ---- Outcome (synthetic Medicare beneficiary summary, partitioned by year) ----
    "synthetic_claims": {
        "path": "outcome/synthetic_medicare",
        "format": "parquet",
        "partition": "year",
        "read_dtypes": {
            "SP_STATE_CODE": "string",
            "BENE_COUNTY_CD": "string",
        },
        "combine_columns": {
            "legacy_code": {
                "from": ["SP_STATE_CODE", "BENE_COUNTY_CD"],
                "method": "concat_zfill",
                "zfill": [2, 3],
                "dtype": "string",
            }
        },
        "keys": {"legacy_code": "legacy_code"},
        "value_columns": {
            "bene_id": "DESYNPUF_ID",
            "death_date": "BENE_DEATH_DT",
            "sex": "BENE_SEX_IDENT_CD",
            "race": "BENE_RACE_CD",
        },
    },
    "ssa_fips_crosswalk": {
        "path": "outcome/ssa_fips_state_county2011.csv",
        "format": "csv",
        "read_dtypes": {"ssacounty": "string", "fipscounty": "string"},
        "keys": {"legacy_code": "ssacounty", "fips": "fipscounty"},
        "value_columns": {},
    },
}
