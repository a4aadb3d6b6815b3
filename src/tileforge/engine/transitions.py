"""Edge and exit-point map transitions over a WorldLayout.

Walking off a map edge, or onto a portal exit tile declared in the world
layout, leads to the neighboring map on the world grid. The spawn cell
on the neighbor is either its authored entry override for the side the
player enters from, or the opposite edge with the carried coordinate
clamped to the neighbor's size.

Example:
    >>> resolver = EdgeTransitionResolver(layout, {"cave": cave_map})
    >>> resolver.resolve("town", 10, 4, 9, 4, 10, 8)
    MapTransitionRequest(target_map='cave', target_x=0, target_y=4)
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from tileforge.core.logging import get_logger
from tileforge.models.enums import Direction
from tileforge.models.game_state import MapTransitionRequest


if TYPE_CHECKING:
    from tileforge.models.map_data import LoadedMap
    from tileforge.models.world import EdgeSpawn, MapPlacement, WorldLayout

logger = get_logger(__name__)

# Direction checks run in this order for exit points
_EXIT_ORDER = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)


# =============================================================================
# Layout Queries
# =============================================================================


def exit_direction(target_x: int, target_y: int, width: int, height: int) -> Direction | None:
    """Side of the map a target cell leaves through, or None if in bounds."""
    if target_y < 0:
        return Direction.UP
    if target_y >= height:
        return Direction.DOWN
    if target_x < 0:
        return Direction.LEFT
    if target_x >= width:
        return Direction.RIGHT
    return None


def neighbor(layout: WorldLayout, map_name: str, direction: Direction) -> str | None:
    """Name of the map adjacent to ``map_name`` in a direction, if placed."""
    placement = layout.maps.get(map_name)
    if placement is None:
        return None
    dx, dy = direction.offset
    return layout.map_at(placement.grid_x + dx, placement.grid_y + dy)


def entry_spawn(placement: MapPlacement | None, direction: Direction) -> EdgeSpawn | None:
    """Entry override on the target map for a player travelling ``direction``.

    Travelling right enters through the target's west side, left through
    its east side, down through its north side and up through its south.
    """
    if placement is None:
        return None
    return {
        Direction.RIGHT: placement.west_entry,
        Direction.LEFT: placement.east_entry,
        Direction.DOWN: placement.north_entry,
        Direction.UP: placement.south_entry,
    }[direction]


def exit_point(placement: MapPlacement | None, direction: Direction) -> EdgeSpawn | None:
    """Portal tile on a map leading to its neighbor in ``direction``."""
    if placement is None:
        return None
    return {
        Direction.UP: placement.north_exit,
        Direction.DOWN: placement.south_exit,
        Direction.LEFT: placement.west_exit,
        Direction.RIGHT: placement.east_exit,
    }[direction]


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def compute_spawn_position(
    direction: Direction,
    player_x: int,
    player_y: int,
    target_width: int,
    target_height: int,
    entry_override: EdgeSpawn | None = None,
) -> tuple[int, int]:
    """Spawn cell on the target map after leaving in ``direction``.

    Args:
        direction: Direction the player travelled.
        player_x: Player column on the source map.
        player_y: Player row on the source map.
        target_width: Target map width.
        target_height: Target map height.
        entry_override: Authored spawn that wins when present.

    Returns:
        The (x, y) spawn cell.
    """
    if entry_override is not None:
        return entry_override.x, entry_override.y

    if direction is Direction.RIGHT:
        return 0, _clamp(player_y, 0, target_height - 1)
    if direction is Direction.LEFT:
        return target_width - 1, _clamp(player_y, 0, target_height - 1)
    if direction is Direction.DOWN:
        return _clamp(player_x, 0, target_width - 1), 0
    return _clamp(player_x, 0, target_width - 1), target_height - 1


# =============================================================================
# Resolver
# =============================================================================


class EdgeTransitionResolver:
    """Answers edge and portal transitions for the maps of one project.

    Attributes:
        layout: World grid placements.
        project_maps: Maps that exist, keyed by name. A neighbor missing
            from this mapping never produces a transition.
    """

    def __init__(self, layout: WorldLayout, project_maps: Mapping[str, LoadedMap]) -> None:
        self.layout = layout
        self.project_maps = project_maps

    def resolve(
        self,
        map_name: str | None,
        target_x: int,
        target_y: int,
        player_x: int,
        player_y: int,
        width: int,
        height: int,
    ) -> MapTransitionRequest | None:
        """Resolve a move toward ``(target_x, target_y)`` off the map edge.

        Args:
            map_name: Current map name in the layout.
            target_x: Attempted column, possibly out of bounds.
            target_y: Attempted row, possibly out of bounds.
            player_x: Player column before the move.
            player_y: Player row before the move.
            width: Current map width.
            height: Current map height.

        Returns:
            A transition request, or None when the target is in bounds or
            there is no known neighbor on that side.
        """
        if not map_name:
            return None

        direction = exit_direction(target_x, target_y, width, height)
        if direction is None:
            return None

        return self._request(map_name, direction, player_x, player_y)

    def resolve_exit_point(
        self, map_name: str | None, target_x: int, target_y: int
    ) -> MapTransitionRequest | None:
        """Resolve stepping onto a portal exit tile of the current map."""
        if not map_name:
            return None
        placement = self.layout.maps.get(map_name)
        if placement is None:
            return None

        for direction in _EXIT_ORDER:
            point = exit_point(placement, direction)
            if point is None or (point.x, point.y) != (target_x, target_y):
                continue
            request = self._request(map_name, direction, target_x, target_y)
            if request is not None:
                return request
        return None

    def _request(
        self,
        map_name: str,
        direction: Direction,
        player_x: int,
        player_y: int,
    ) -> MapTransitionRequest | None:
        target_name = neighbor(self.layout, map_name, direction)
        if target_name is None:
            return None
        target_map = self.project_maps.get(target_name)
        if target_map is None:
            logger.debug("Neighbor map not in project", map=map_name, neighbor=target_name)
            return None

        override = entry_spawn(self.layout.maps.get(target_name), direction)
        spawn_x, spawn_y = compute_spawn_position(
            direction,
            player_x,
            player_y,
            target_map.width,
            target_map.height,
            override,
        )
        return MapTransitionRequest(target_map=target_name, target_x=spawn_x, target_y=spawn_y)


__all__ = [
    "EdgeTransitionResolver",
    "compute_spawn_position",
    "entry_spawn",
    "exit_direction",
    "exit_point",
    "neighbor",
]
