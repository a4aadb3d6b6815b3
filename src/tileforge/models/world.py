"""World layout models: how maps sit next to each other.

Maps are placed on an integer grid; two maps in orthogonally adjacent
cells are neighbors. A placement can override where the player appears
when entering from a side, and can declare portal tiles that lead to a
neighbor when stepped on.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EdgeSpawn(BaseModel):
    """A tile coordinate used as an entry spawn or portal exit."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    x: int
    y: int


class MapPlacement(BaseModel):
    """A map's cell on the world grid plus its entry/exit overrides.

    Entry fields name the side the player comes in from: ``west_entry``
    is used when the player walked east off the neighbor to the left.
    Exit fields are portal tiles on this map leading to the neighbor in
    that direction.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )

    grid_x: int = 0
    grid_y: int = 0
    north_entry: EdgeSpawn | None = None
    south_entry: EdgeSpawn | None = None
    east_entry: EdgeSpawn | None = None
    west_entry: EdgeSpawn | None = None
    north_exit: EdgeSpawn | None = None
    south_exit: EdgeSpawn | None = None
    east_exit: EdgeSpawn | None = None
    west_exit: EdgeSpawn | None = None


class WorldLayout(BaseModel):
    """All placed maps keyed by map name."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    maps: dict[str, MapPlacement] = Field(default_factory=dict)

    def map_at(self, grid_x: int, grid_y: int) -> str | None:
        """Name of the map placed at a grid cell, or None."""
        for name, placement in self.maps.items():
            if placement.grid_x == grid_x and placement.grid_y == grid_y:
                return name
        return None


__all__ = [
    "EdgeSpawn",
    "MapPlacement",
    "WorldLayout",
]
