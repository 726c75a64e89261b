from __future__ import annotations

from rpg.combat.entities import Enemy, EnemyType, Hero


def make_hero(hero_id: str = "hero-1", **overrides) -> Hero:
    data = {"name": f"Hero {hero_id}", "level": 1, "experience": 0, "enemies_killed_amount": 0}
    data.update(overrides)
    return Hero(id=hero_id, **data)


def make_enemy(enemy_id: str = "enemy-1", enemy_type: EnemyType = EnemyType.GOBLIN, **overrides) -> Enemy:
    data = {"name": f"Enemy {enemy_id}", "level": 3, "experience": 100, "killed_by_hero_id": None}
    data.update(overrides)
    return Enemy(id=enemy_id, enemy_type=enemy_type, **data)
