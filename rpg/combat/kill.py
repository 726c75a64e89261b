from __future__ import annotations

import logging
from dataclasses import dataclass

import config
from rpg.combat.entities import Enemy, Hero
from rpg.combat.leveling import experience_for_kill

logger = logging.getLogger("rpgcombat")


@dataclass(frozen=True)
class KillOutcome:
    hero_id: str
    enemy_id: str
    experience_gained: int
    leveled_up: bool


def kill_enemy(hero: Hero, enemy: Enemy) -> KillOutcome:
    """Apply a kill to the two in-memory objects. No persistence.

    The caller has already checked that the enemy is alive and of the expected
    type; `mark_killed_by` still refuses to overwrite an existing marker.
    """
    enemy.mark_killed_by(hero.id)
    hero.enemies_killed_amount += 1
    hero.enemies_killed.append(enemy.id)

    exp = experience_for_kill(enemy.level)
    leveled_up = hero.gain_experience(exp)

    if config.VERBOSE_DEBUG:
        logger.debug(
            "combat.kill_enemy: hero_id=%s enemy_id=%s enemy_level=%s exp=%s level=%s leveled_up=%s",
            hero.id,
            enemy.id,
            enemy.level,
            exp,
            hero.level,
            leveled_up,
        )

    return KillOutcome(hero_id=hero.id, enemy_id=enemy.id, experience_gained=exp, leveled_up=leveled_up)
