"""Combat-related domain logic."""

from .entities import Enemy, EnemyType, Hero
from .errors import (
    CombatError,
    EnemyAlreadyKilledError,
    EnemyNotFoundError,
    EnemyTypeMismatchError,
    HeroNotFoundError,
)
from .kill import KillOutcome, kill_enemy
from .leveling import LevelResult, experience_for_kill, gain_experience, get_required_exp

__all__ = [
    "Enemy",
    "EnemyType",
    "Hero",
    "CombatError",
    "EnemyAlreadyKilledError",
    "EnemyNotFoundError",
    "EnemyTypeMismatchError",
    "HeroNotFoundError",
    "KillOutcome",
    "kill_enemy",
    "LevelResult",
    "experience_for_kill",
    "gain_experience",
    "get_required_exp",
]
