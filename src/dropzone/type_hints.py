"""Type hints used in Dropzone."""

from typing import Dict, List, Mapping, Union

# placement -> points
PlacementTable = Mapping[int, int]
# One raw result as entered by an organizer: team_id, placement, kills
ResultEntry = Mapping[str, Union[str, int]]
ResultEntries = List[ResultEntry]
# placement -> percentage of the prize pool
PrizeDistribution = Dict[int, float]

#  LocalWords:  PlacementTable ResultEntry
