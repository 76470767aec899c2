"""
ACS 5-year variable catalog used to derive county census fields.

Each group maps a derived numerator/denominator name to the list of raw
estimate variables summed to build it.
"""

CENSUS_VARIABLE_GROUPS = {
    # B17001: poverty status in the past 12 months
    "poverty_universe": ["B17001_001E"],
    "below_poverty": ["B17001_002E"],
    # B03002: Hispanic or Latino origin by race
    "race_universe": ["B03002_001E"],
    "white": ["B03002_003E"],
    "black": ["B03002_004E"],
    "native": ["B03002_005E"],
    "asian": ["B03002_006E"],
    "hispanic": ["B03002_012E"],
    # B15002: educational attainment for the population 25 years and over
    "education_universe": ["B15002_001E"],
    "below_highschool": [
        # male: no schooling through 12th grade, no diploma
        "B15002_003E", "B15002_004E", "B15002_005E", "B15002_006E",
        "B15002_007E", "B15002_008E", "B15002_009E", "B15002_010E",
        # female
        "B15002_020E", "B15002_021E", "B15002_022E", "B15002_023E",
        "B15002_024E", "B15002_025E", "B15002_026E", "B15002_027E",
    ],
    # B19013 / B25077: medians, used as-is
    "household_income": ["B19013_001E"],
    "median_house_value": ["B25077_001E"],
    # B01003: total population
    "total_population": ["B01003_001E"],
}


def all_variables() -> list[str]:
    """Flat, de-duplicated list of raw variables in catalog order."""
    seen = []
    for variables in CENSUS_VARIABLE_GROUPS.values():
        for v in variables:
            if v not in seen:
                seen.append(v)
    return seen
