"""Runtime map models built from exported TileForge map JSON.

A LoadedMap is the static half of a play session: its layers and group
definitions never change while playing. Everything that moves or
changes lives in GameState.

Models:
    TileGroup: Definition shared by every tile or entity of one group.
    MapLayer: One named grid of group-name references.
    EntityPlacement: An entity as placed on the map by the author.
    LoadedMap: Dimensions, layers, groups and placements of one map.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tileforge.models.enums import EntityType


def _stringify_properties(value: Any) -> Any:
    """Coerce authored property values to strings; None becomes an empty bag."""
    if value is None:
        return {}
    if isinstance(value, dict):
        return {str(k): "" if v is None else str(v) for k, v in value.items()}
    return value


class _ExportModel(BaseModel):
    """Base for models read from camelCase export JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class TileGroup(_ExportModel):
    """Definition of a tile or entity group.

    Attributes:
        name: Unique group name referenced by layer cells and placements.
        group_type: "Tile" or "Entity" as exported by the editor.
        is_solid: Blocks movement and line of sight.
        is_passable: Editor hint; movement is governed by is_solid.
        is_hazardous: Entering the tile applies damage / status effects.
        movement_cost: Multiplier on move duration (1.0 is normal).
        damage_type: Authored damage tag, e.g. "fire" or "spikes".
        damage_per_tick: Instant damage on entering a hazardous tile.
        is_player: Placements of this group are the player start.
        entity_type: Interaction category for entity groups.
        default_properties: Property bag merged under placement overrides.
    """

    name: str
    group_type: str = Field(default="Tile", alias="type")
    is_solid: bool = False
    is_passable: bool = True
    is_hazardous: bool = False
    movement_cost: float = 1.0
    damage_type: str | None = None
    damage_per_tick: int = 0
    is_player: bool = False
    entity_type: EntityType = EntityType.INTERACTABLE
    default_properties: dict[str, str] = Field(default_factory=dict)

    @field_validator("is_solid", "is_hazardous", "is_player", mode="before")
    @classmethod
    def _false_when_null(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("is_passable", mode="before")
    @classmethod
    def _true_when_null(cls, value: Any) -> Any:
        return True if value is None else value

    @field_validator("movement_cost", mode="before")
    @classmethod
    def _unit_cost_when_null(cls, value: Any) -> Any:
        return 1.0 if value is None else value

    @field_validator("damage_per_tick", mode="before")
    @classmethod
    def _zero_when_null(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("entity_type", mode="before")
    @classmethod
    def _parse_entity_type(cls, value: Any) -> EntityType:
        if isinstance(value, EntityType):
            return value
        return EntityType.parse(value if isinstance(value, str) else None)

    @field_validator("default_properties", mode="before")
    @classmethod
    def _coerce_properties(cls, value: Any) -> Any:
        return _stringify_properties(value)


class MapLayer(_ExportModel):
    """A named grid layer stored row-major as group names (None = empty)."""

    name: str = ""
    cells: list[str | None] = Field(default_factory=list)

    @field_validator("cells", mode="before")
    @classmethod
    def _empty_when_null(cls, value: Any) -> Any:
        return [] if value is None else value

    def get_cell(self, x: int, y: int, width: int) -> str | None:
        """Group name at (x, y), or None when empty or outside the stored cells."""
        index = x + y * width
        if index < 0 or index >= len(self.cells):
            return None
        return self.cells[index]


class EntityPlacement(_ExportModel):
    """An entity as placed by the author, before group defaults are merged."""

    id: str
    group_name: str
    x: int
    y: int
    properties: dict[str, str] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _coerce_properties(cls, value: Any) -> Any:
        return _stringify_properties(value)


class LoadedMap(_ExportModel):
    """A map ready to be played.

    Attributes:
        id: Map identifier used for world-layout lookups and visit flags.
        width: Width in tiles.
        height: Height in tiles.
        layers: Tile layers, bottom first.
        groups: Group definitions referenced by layers and placements.
        entities: Authored entity placements, including the player start.
    """

    id: str | None = None
    width: int = Field(ge=0)
    height: int = Field(ge=0)
    layers: list[MapLayer] = Field(default_factory=list)
    groups: list[TileGroup] = Field(default_factory=list)
    entities: list[EntityPlacement] = Field(default_factory=list)

    @field_validator("layers", "groups", "entities", mode="before")
    @classmethod
    def _empty_when_null(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("entities")
    @classmethod
    def _unique_entity_ids(cls, value: list[EntityPlacement]) -> list[EntityPlacement]:
        seen: set[str] = set()
        for placement in value:
            if placement.id in seen:
                raise ValueError(f"Duplicate entity id: {placement.id}")
            seen.add(placement.id)
        return value

    @property
    def groups_by_name(self) -> dict[str, TileGroup]:
        """Group definitions keyed by name; later duplicates win."""
        return {group.name: group for group in self.groups}

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether (x, y) lies inside the map."""
        return 0 <= x < self.width and 0 <= y < self.height

    def get_cell(self, layer: MapLayer, x: int, y: int) -> str | None:
        """Group name a layer holds at (x, y); None outside the map."""
        if not self.in_bounds(x, y):
            return None
        return layer.get_cell(x, y, self.width)

    def groups_at(
        self,
        x: int,
        y: int,
        groups_by_name: dict[str, TileGroup] | None = None,
    ) -> Iterator[TileGroup]:
        """Yield the tile group of every layer occupying (x, y), bottom layer first.

        Args:
            x: Tile column.
            y: Tile row.
            groups_by_name: Pre-built lookup to avoid rebuilding it per call.
        """
        lookup = groups_by_name if groups_by_name is not None else self.groups_by_name
        for layer in self.layers:
            name = layer.get_cell(x, y, self.width)
            if name is not None and name in lookup:
                yield lookup[name]


__all__ = [
    "EntityPlacement",
    "LoadedMap",
    "MapLayer",
    "TileGroup",
]
