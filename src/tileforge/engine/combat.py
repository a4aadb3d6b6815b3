"""Combat arithmetic shared by player and entity attacks."""

from __future__ import annotations

from tileforge.core.constants import MIN_DAMAGE


def calculate_damage(attack: int, defense: int) -> int:
    """Damage dealt by one hit.

    Defense subtracts directly from attack, but every hit lands for at
    least one point.

    Args:
        attack: Attacker's effective attack.
        defense: Defender's effective defense.

    Returns:
        Damage to apply, never below 1.

    Example:
        >>> calculate_damage(5, 2)
        3
        >>> calculate_damage(1, 10)
        1
    """
    return max(MIN_DAMAGE, attack - defense)


__all__ = [
    "calculate_damage",
]
