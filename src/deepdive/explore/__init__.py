from .controllers import (
    AutoexploreController,
    ExploreState,
    StairTravelController,
    TravelFailure,
    TravelState,
)
from .movement import try_step
from .targets import count_unexplored, find_nearest_discovered_stairwell, find_nearest_unexplored

__all__ = [
    "AutoexploreController",
    "ExploreState",
    "StairTravelController",
    "TravelFailure",
    "TravelState",
    "try_step",
    "count_unexplored",
    "find_nearest_discovered_stairwell",
    "find_nearest_unexplored",
]
