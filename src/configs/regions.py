"""State FIPS to postal code, and postal code to census region, for the contiguous US."""

# Territories and non-contiguous states dropped from the study universe
EXCLUDED_STATE_FIPS = {"02", "15", "60", "66", "69", "72", "78"}

STATE_FIPS_TO_POSTAL = {
    "01": "AL", "04": "AZ", "05": "AR", "06": "CA", "08": "CO", "09": "CT",
    "10": "DE", "11": "DC", "12": "FL", "13": "GA", "16": "ID", "17": "IL",
    "18": "IN", "19": "IA", "20": "KS", "21": "KY", "22": "LA", "23": "ME",
    "24": "MD", "25": "MA", "26": "MI", "27": "MN", "28": "MS", "29": "MO",
    "30": "MT", "31": "NE", "32": "NV", "33": "NH", "34": "NJ", "35": "NM",
    "36": "NY", "37": "NC", "38": "ND", "39": "OH", "40": "OK", "41": "OR",
    "42": "PA", "44": "RI", "45": "SC", "46": "SD", "47": "TN", "48": "TX",
    "49": "UT", "50": "VT", "51": "VA", "53": "WA", "54": "WV", "55": "WI",
    "56": "WY",
}

STATE_REGION = {
    # Northeast
    "CT": "NORTHEAST", "ME": "NORTHEAST", "MA": "NORTHEAST", "NH": "NORTHEAST",
    "RI": "NORTHEAST", "VT": "NORTHEAST", "NJ": "NORTHEAST", "NY": "NORTHEAST",
    "PA": "NORTHEAST",
    # Midwest
    "IL": "MIDWEST", "IN": "MIDWEST", "MI": "MIDWEST", "OH": "MIDWEST",
    "WI": "MIDWEST", "IA": "MIDWEST", "KS": "MIDWEST", "MN": "MIDWEST",
    "MO": "MIDWEST", "NE": "MIDWEST", "ND": "MIDWEST", "SD": "MIDWEST",
    # South
    "DE": "SOUTH", "DC": "SOUTH", "FL": "SOUTH", "GA": "SOUTH", "MD": "SOUTH",
    "NC": "SOUTH", "SC": "SOUTH", "VA": "SOUTH", "WV": "SOUTH", "AL": "SOUTH",
    "KY": "SOUTH", "MS": "SOUTH", "TN": "SOUTH", "AR": "SOUTH", "LA": "SOUTH",
    "OK": "SOUTH", "TX": "SOUTH",
    # West
    "AZ": "WEST", "CO": "WEST", "ID": "WEST", "MT": "WEST", "NV": "WEST",
    "NM": "WEST", "UT": "WEST", "WY": "WEST", "CA": "WEST", "OR": "WEST",
    "WA": "WEST",
}
