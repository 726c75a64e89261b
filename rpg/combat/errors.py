"""Combat exceptions.

Every error carries the offending ids so a caller can tell a bad id from a
wrong fight. None of them are retried: a retried kill on a dead enemy fails
the same way again.
"""

from __future__ import annotations

from typing import Optional


class CombatError(Exception):
    """Base class for kill-attempt failures."""


class HeroNotFoundError(CombatError):
    def __init__(self, hero_id: str):
        self.hero_id = hero_id
        super().__init__(f"Hero with ID {hero_id} not found")


class EnemyNotFoundError(CombatError):
    def __init__(self, enemy_id: str):
        self.enemy_id = enemy_id
        super().__init__(f"Enemy with ID {enemy_id} not found")


class EnemyAlreadyKilledError(CombatError):
    """The enemy was dead at read time, or another attempt won the commit."""

    def __init__(self, enemy_id: str, killed_by_hero_id: Optional[str] = None):
        self.enemy_id = enemy_id
        self.killed_by_hero_id = killed_by_hero_id
        super().__init__(f"Enemy {enemy_id} has already been killed")


class EnemyTypeMismatchError(CombatError):
    def __init__(self, enemy_id: str, expected_type: str, actual_type: str):
        self.enemy_id = enemy_id
        self.expected_type = str(expected_type)
        self.actual_type = str(actual_type)
        super().__init__(
            f"Enemy {enemy_id} is not of type {self.expected_type} (actual: {self.actual_type})"
        )
