"""
Hand-curated county corrections.

These are explicit lookup tables, not geometric inference: each entry was
checked by hand and must stay reproducible.
"""

# Loving County, TX has a near-zero population and no usable ACS ratios.
# Its ratios are the mean of these neighbors' derived ratios.
TEXAS_NEIGHBORS = {
    "48301": ["48495", "48389", "48475", "48109"],  # Winkler, Reeves, Ward, Culberson
}

TEXAS_IMPUTED_FIELDS = [
    "cs_poverty",
    "cs_hispanic",
    "cs_black",
    "cs_white",
    "cs_native",
    "cs_asian",
    "cs_ed_below_highschool",
    "cs_household_income",
    "cs_median_house_value",
]

# Fields floored to an integer after neighbor averaging
TEXAS_FLOORED_FIELDS = ["cs_household_income"]

# Virginia independent cities too small to contain a gridMET cell centroid.
# Each takes the climate record of the county that surrounds it.
VIRGINIA_CONTAINING_COUNTY = {
    "51580": "51005",  # Covington city <- Alleghany County
    "51678": "51163",  # Lexington city <- Rockbridge County
    "51610": "51059",  # Falls Church city <- Fairfax County
    "51515": "51019",  # Bedford city <- Bedford County
}
