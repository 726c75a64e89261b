"""Combat stores.

A store reads heroes/enemies and commits a kill as one atomic unit:

- the enemy write is a compare-and-swap on `killed_by_hero_id IS NULL`
- the hero write is a delta (kill count + 1, experience gain with leveling)
  applied to the row's current values, so two kills by the same hero that
  commit back to back both land

`commit_kill` returns True on commit and False when the enemy was no longer
alive. On False or on any exception neither row has changed.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Protocol

import config
import db
from db_http import close_client
from rpg.combat.entities import Enemy, Hero
from rpg.combat.errors import EnemyNotFoundError, HeroNotFoundError
from rpg.combat.leveling import gain_experience

logger = logging.getLogger("rpgcombat")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_conditional(expect_alive: bool) -> None:
    # killed_by_hero_id is write-once; there is no unconditional enemy write
    if not expect_alive:
        raise ValueError("commit_kill only supports expect_alive=True")


class CombatStore(Protocol):
    async def read_hero(self, hero_id: str) -> Optional[Hero]: ...

    async def read_enemy(self, enemy_id: str) -> Optional[Enemy]: ...

    async def commit_kill(
        self,
        hero: Hero,
        enemy: Enemy,
        *,
        experience_gained: int,
        expect_alive: bool = True,
    ) -> bool: ...

    async def list_heroes(self) -> List[Hero]: ...

    async def list_enemies(self) -> List[Enemy]: ...

    async def close(self) -> None: ...


class SupabaseCombatStore:
    """PostgREST backed store (see db.py and sql/schema.sql)."""

    async def read_hero(self, hero_id: str) -> Optional[Hero]:
        row = await db.get_hero(hero_id)
        return Hero.from_row(row) if row else None

    async def read_enemy(self, enemy_id: str) -> Optional[Enemy]:
        row = await db.get_enemy(enemy_id)
        return Enemy.from_row(row) if row else None

    async def commit_kill(
        self,
        hero: Hero,
        enemy: Enemy,
        *,
        experience_gained: int,
        expect_alive: bool = True,
    ) -> bool:
        _require_conditional(expect_alive)
        return await db.commit_kill(hero.id, enemy.id, experience_gained)

    async def list_heroes(self) -> List[Hero]:
        return [Hero.from_row(r) for r in await db.list_heroes()]

    async def list_enemies(self) -> List[Enemy]:
        return [Enemy.from_row(r) for r in await db.list_enemies()]

    async def close(self) -> None:
        await close_client()


class MemoryCombatStore:
    """In-process store: rows keyed by id, one lock around commits.

    Reads yield to the event loop so concurrent attempts interleave the way
    they would against a real database. `fail_commit_with` makes the next
    commit raise after its checks pass and before anything is swapped in.
    """

    def __init__(self, heroes: Iterable[Hero] = (), enemies: Iterable[Enemy] = ()):
        self._heroes: dict[str, dict[str, Any]] = {}
        self._enemies: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

        self.commits = 0
        self.conflicts = 0
        self.fail_commit_with: Optional[BaseException] = None

        for hero in heroes:
            self.add_hero(hero)
        for enemy in enemies:
            self.add_enemy(enemy)

    def add_hero(self, hero: Hero) -> None:
        self._heroes[hero.id] = self._stamped(hero.to_row())

    def add_enemy(self, enemy: Enemy) -> None:
        self._enemies[enemy.id] = self._stamped(enemy.to_row())

    @staticmethod
    def _stamped(row: dict[str, Any]) -> dict[str, Any]:
        # column defaults of sql/schema.sql
        now = _now_iso()
        row["created_at"] = row.get("created_at") or now
        row["updated_at"] = row.get("updated_at") or row["created_at"]
        return row

    def _kills_of(self, hero_id: str) -> list[str]:
        return [eid for eid, row in self._enemies.items() if row["killed_by_hero_id"] == hero_id]

    def _hero_from_row(self, row: dict[str, Any]) -> Hero:
        data = dict(row)
        data["enemies_killed"] = self._kills_of(row["id"])
        return Hero.from_row(data)

    async def read_hero(self, hero_id: str) -> Optional[Hero]:
        await asyncio.sleep(0)
        row = self._heroes.get(hero_id)
        return self._hero_from_row(row) if row else None

    async def read_enemy(self, enemy_id: str) -> Optional[Enemy]:
        await asyncio.sleep(0)
        row = self._enemies.get(enemy_id)
        return Enemy.from_row(row) if row else None

    async def commit_kill(
        self,
        hero: Hero,
        enemy: Enemy,
        *,
        experience_gained: int,
        expect_alive: bool = True,
    ) -> bool:
        _require_conditional(expect_alive)

        async with self._lock:
            hero_row = self._heroes.get(hero.id)
            if hero_row is None:
                raise HeroNotFoundError(hero.id)

            enemy_row = self._enemies.get(enemy.id)
            if enemy_row is None:
                raise EnemyNotFoundError(enemy.id)
            if enemy_row["killed_by_hero_id"] is not None:
                self.conflicts += 1
                if config.VERBOSE_DEBUG:
                    logger.debug(
                        "memory.commit_kill conflict: enemy_id=%s killed_by=%s loser=%s",
                        enemy.id,
                        enemy_row["killed_by_hero_id"],
                        hero.id,
                    )
                return False

            now = _now_iso()
            staged_enemy = copy.deepcopy(enemy_row)
            staged_enemy["killed_by_hero_id"] = hero.id
            staged_enemy["updated_at"] = now

            staged_hero = copy.deepcopy(hero_row)
            result = gain_experience(staged_hero["level"], staged_hero["experience"], experience_gained)
            staged_hero["level"] = result.level
            staged_hero["experience"] = result.experience
            staged_hero["enemies_killed_amount"] += 1
            staged_hero["updated_at"] = now

            if self.fail_commit_with is not None:
                exc, self.fail_commit_with = self.fail_commit_with, None
                raise exc

            self._enemies[enemy.id] = staged_enemy
            self._heroes[hero.id] = staged_hero
            self.commits += 1
            return True

    async def list_heroes(self) -> List[Hero]:
        heroes = [self._hero_from_row(r) for r in self._heroes.values()]
        heroes.sort(key=lambda h: h.name)
        heroes.sort(key=lambda h: (h.level, h.enemies_killed_amount), reverse=True)
        return heroes

    async def list_enemies(self) -> List[Enemy]:
        enemies = [Enemy.from_row(r) for r in self._enemies.values()]
        enemies.sort(key=lambda e: e.name)
        enemies.sort(key=lambda e: e.level, reverse=True)
        enemies.sort(key=lambda e: e.enemy_type.value)
        return enemies

    async def close(self) -> None:
        return None


def build_store(backend: Optional[str] = None) -> CombatStore:
    """Create the store selected by STORE_BACKEND (supabase | memory)."""
    backend = (backend or getattr(config, "STORE_BACKEND", "supabase") or "supabase").strip().lower()

    if backend == "memory":
        logger.info("✅ store: memory")
        return MemoryCombatStore()
    if backend == "supabase":
        config.validate_supabase_settings()
        logger.info("✅ store: supabase url=%s", config.SUPABASE_URL)
        return SupabaseCombatStore()
    raise ValueError(f"❌ STORE_BACKEND が不正です: {backend!r} (supabase / memory)")
