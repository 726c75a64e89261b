"""Hero / Enemy domain models.

Storage-agnostic: rows go in through `from_row` and come out through `to_row`
using the column names of sql/schema.sql. Relations are held as ids only;
`Hero.enemies_killed` is a projection of `Enemy.killed_by_hero_id`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from rpg.combat.errors import EnemyAlreadyKilledError
from rpg.combat.leveling import gain_experience


class EnemyType(str, Enum):
    DRAGON = "DRAGON"
    ORC = "ORC"
    GOBLIN = "GOBLIN"
    TROLL = "TROLL"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> "EnemyType":
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().upper()
        try:
            return cls(raw)
        except ValueError:
            allowed = ", ".join(t.value for t in cls)
            raise ValueError(f"unknown enemy type {value!r} (expected one of: {allowed})") from None


@dataclass
class Enemy:
    id: str
    name: str
    enemy_type: EnemyType
    level: int = 1
    experience: int = 0
    killed_by_hero_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_alive(self) -> bool:
        return self.killed_by_hero_id is None

    def gain_experience(self, amount: int) -> bool:
        result = gain_experience(self.level, self.experience, amount)
        self.level = result.level
        self.experience = result.experience
        return result.leveled_up

    def mark_killed_by(self, hero_id: str) -> None:
        # one-way: alive -> killed, never overwritten
        if self.killed_by_hero_id is not None:
            raise EnemyAlreadyKilledError(self.id, self.killed_by_hero_id)
        self.killed_by_hero_id = hero_id

    @classmethod
    def from_row(cls, data: dict[str, Any]) -> "Enemy":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            enemy_type=EnemyType.parse(data.get("enemy_type")),
            level=int(data.get("level", 1)),
            experience=int(data.get("experience", 0)),
            killed_by_hero_id=str(data["killed_by_hero_id"]) if data.get("killed_by_hero_id") else None,
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "enemy_type": self.enemy_type.value,
            "level": self.level,
            "experience": self.experience,
            "killed_by_hero_id": self.killed_by_hero_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Hero:
    id: str
    name: str
    level: int = 1
    experience: int = 0
    enemies_killed_amount: int = 0
    enemies_killed: list[str] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def gain_experience(self, amount: int) -> bool:
        result = gain_experience(self.level, self.experience, amount)
        self.level = result.level
        self.experience = result.experience
        return result.leveled_up

    @classmethod
    def from_row(cls, data: dict[str, Any]) -> "Hero":
        # PostgREST embed (`enemies_killed:enemies(id)`) returns [{"id": ...}]
        killed = []
        for item in data.get("enemies_killed") or []:
            if isinstance(item, dict):
                killed.append(str(item["id"]))
            else:
                killed.append(str(item))

        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            level=int(data.get("level", 1)),
            experience=int(data.get("experience", 0)),
            enemies_killed_amount=int(data.get("enemies_killed_amount", 0)),
            enemies_killed=killed,
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )

    def to_row(self) -> dict[str, Any]:
        # enemies_killed is derived from enemies.killed_by_hero_id, not a column
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "experience": self.experience,
            "enemies_killed_amount": self.enemies_killed_amount,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
