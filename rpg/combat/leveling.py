from __future__ import annotations

from dataclasses import dataclass

from settings.balance import KILL_EXP_PER_ENEMY_LEVEL, LEVEL_EXP_FACTOR


@dataclass(frozen=True)
class LevelResult:
    level: int
    experience: int
    leveled_up: bool


def get_required_exp(level: int) -> int:
    """レベルアップに必要なEXPを計算"""
    return level * LEVEL_EXP_FACTOR


def gain_experience(level: int, experience: int, amount: int) -> LevelResult:
    """Add `amount` experience and level up as many times as it covers.

    Negative experience is kept as-is (no clamping); such a hero simply needs
    more gain before the next threshold is reached.
    """
    if level < 1:
        raise ValueError(f"level must be >= 1 to gain experience (got {level})")

    new_level = int(level)
    new_exp = int(experience) + int(amount)

    while new_exp >= get_required_exp(new_level):
        new_exp -= get_required_exp(new_level)
        new_level += 1

    return LevelResult(level=new_level, experience=new_exp, leveled_up=new_level > level)


def experience_for_kill(enemy_level: int) -> int:
    """撃破報酬EXP。level 0 の敵は 0 EXP（エラーではない）。"""
    if enemy_level < 0:
        raise ValueError(f"enemy level must be >= 0 (got {enemy_level})")
    return int(enemy_level) * KILL_EXP_PER_ENEMY_LEVEL
