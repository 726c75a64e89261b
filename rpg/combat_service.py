"""Kill transition coordinator.

`attempt_kill` reads both rows, checks the request, computes the kill in
memory and hands the result to the store as one conditional commit. The
read-time checks only fail fast; the store's compare-and-swap on the enemy's
killed_by_hero_id decides races, so exactly one concurrent attempt per enemy
succeeds.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import List

import config
from rpg.combat.entities import Enemy, EnemyType, Hero
from rpg.combat.errors import (
    EnemyAlreadyKilledError,
    EnemyNotFoundError,
    EnemyTypeMismatchError,
    HeroNotFoundError,
)
from rpg.combat.kill import kill_enemy
from rpg.store import CombatStore

logger = logging.getLogger("rpgcombat")


@dataclass(frozen=True)
class KillResult:
    action_id: str
    experience_gained: int = 0
    leveled_up: bool = False


async def attempt_kill(store: CombatStore, hero_id: str, enemy_id: str, enemy_type) -> KillResult:
    expected_type = EnemyType.parse(enemy_type)

    hero, enemy = await asyncio.gather(store.read_hero(hero_id), store.read_enemy(enemy_id))

    if hero is None:
        raise HeroNotFoundError(hero_id)
    if enemy is None:
        raise EnemyNotFoundError(enemy_id)
    if not enemy.is_alive:
        raise EnemyAlreadyKilledError(enemy_id, enemy.killed_by_hero_id)
    if enemy.enemy_type != expected_type:
        raise EnemyTypeMismatchError(enemy_id, expected_type.value, enemy.enemy_type.value)

    outcome = kill_enemy(hero, enemy)

    committed = await store.commit_kill(
        hero,
        enemy,
        experience_gained=outcome.experience_gained,
        expect_alive=True,
    )
    if not committed:
        logger.info("combat.kill lost race: hero_id=%s enemy_id=%s", hero_id, enemy_id)
        raise EnemyAlreadyKilledError(enemy_id)

    logger.info(
        "combat.kill: hero_id=%s enemy_id=%s type=%s exp=%s leveled_up=%s",
        hero_id,
        enemy_id,
        expected_type.value,
        outcome.experience_gained,
        outcome.leveled_up,
    )
    return KillResult(
        action_id=enemy.id,
        experience_gained=outcome.experience_gained,
        leveled_up=outcome.leveled_up,
    )


async def get_all_heroes(store: CombatStore) -> List[Hero]:
    heroes = await store.list_heroes()
    if config.VERBOSE_DEBUG:
        logger.debug("combat.get_all_heroes: count=%s", len(heroes))
    return heroes


async def get_all_enemies(store: CombatStore) -> List[Enemy]:
    enemies = await store.list_enemies()
    if config.VERBOSE_DEBUG:
        logger.debug("combat.get_all_enemies: count=%s", len(enemies))
    return enemies
