"""Named fill-missing-county strategies. Each source applies its own; they are not interchangeable."""

from src.imputation.strategies import (
    FillStrategy,
    NeighborMeanFill,
    StateMedianFill,
    StateNormalSampleFill,
    ContainmentCopyFill,
    add_missing_counties,
)

__all__ = [
    "FillStrategy",
    "NeighborMeanFill",
    "StateMedianFill",
    "StateNormalSampleFill",
    "ContainmentCopyFill",
    "add_missing_counties",
]
