"""Grid stepping and line-of-sight queries for entity AI.

The pathfinder is deliberately greedy: it never searches, it only picks
one adjacent cell that closes the distance to a target. Movement is
checked against the static map (solid tiles on any layer) and the live
occupants read from the current GameState on every call, so it always
sees the latest player and entity positions.

Example:
    >>> pathfinder = SimplePathfinder(loaded_map, state)
    >>> pathfinder.next_step(5, 5, 8, 5)
    (6, 5)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol


if TYPE_CHECKING:
    from tileforge.models.game_state import GameState
    from tileforge.models.map_data import LoadedMap


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class Pathfinder(Protocol):
    """Movement queries consumed by entity AI."""

    def next_step(
        self, from_x: int, from_y: int, to_x: int, to_y: int
    ) -> tuple[int, int] | None:
        """One adjacent cell toward the target, or None."""
        ...

    def has_line_of_sight(self, from_x: int, from_y: int, to_x: int, to_y: int) -> bool:
        """Whether no solid tile lies strictly between two cells."""
        ...


class SimplePathfinder:
    """Axis-priority stepper over a LoadedMap and the live GameState.

    Attributes:
        loaded_map: The static map being played.
        state: Session state providing player and entity positions.
    """

    def __init__(self, loaded_map: LoadedMap, state: GameState) -> None:
        self.loaded_map = loaded_map
        self.state = state
        self._groups = loaded_map.groups_by_name

    def next_step(
        self, from_x: int, from_y: int, to_x: int, to_y: int
    ) -> tuple[int, int] | None:
        """Pick one adjacent cell that moves closer to the target.

        The axis with the larger distance is tried first, horizontal on a
        tie; the other axis is the fallback. The mover is identified by
        its position ``(from_x, from_y)`` and never blocks itself.

        Args:
            from_x: Mover column.
            from_y: Mover row.
            to_x: Target column.
            to_y: Target row.

        Returns:
            The chosen cell, or None if already at the target or both
            candidate steps are blocked.
        """
        if from_x == to_x and from_y == to_y:
            return None

        dx = to_x - from_x
        dy = to_y - from_y
        step_x = (from_x + _sign(dx), from_y) if dx else None
        step_y = (from_x, from_y + _sign(dy)) if dy else None

        if abs(dx) >= abs(dy):
            candidates = (step_x, step_y)
        else:
            candidates = (step_y, step_x)

        for candidate in candidates:
            if candidate is not None and self._is_walkable(*candidate, from_x, from_y):
                return candidate
        return None

    def has_line_of_sight(self, from_x: int, from_y: int, to_x: int, to_y: int) -> bool:
        """Walk the Bresenham line between two cells.

        Only intermediate cells are checked; the endpoints may be solid.
        Cells outside the map count as blocking.
        """
        x, y = from_x, from_y
        dx = abs(to_x - from_x)
        dy = abs(to_y - from_y)
        sx = 1 if from_x < to_x else -1
        sy = 1 if from_y < to_y else -1
        err = dx - dy

        while True:
            is_start = x == from_x and y == from_y
            is_end = x == to_x and y == to_y
            if not is_start and not is_end and not self._is_tile_clear(x, y):
                return False
            if is_end:
                return True

            e2 = 2 * err
            if e2 > -dy:
                err -= dy
                x += sx
            if e2 < dx:
                err += dx
                y += sy

    def _is_tile_clear(self, x: int, y: int) -> bool:
        if not self.loaded_map.in_bounds(x, y):
            return False
        return not any(group.is_solid for group in self.loaded_map.groups_at(x, y, self._groups))

    def _is_walkable(self, x: int, y: int, caller_x: int, caller_y: int) -> bool:
        if not self._is_tile_clear(x, y):
            return False

        player = self.state.player
        if player is not None and player.x == x and player.y == y:
            return False

        for entity in self.state.entities.values():
            if not entity.is_active:
                continue
            if entity.x == caller_x and entity.y == caller_y:
                continue
            if entity.x == x and entity.y == y:
                return False
        return True


__all__ = [
    "Pathfinder",
    "SimplePathfinder",
]
