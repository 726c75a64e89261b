"""aiohttp routes around rpg.combat_service.

PUT /combat/heroes/{hero_id}/kill/{enemy_type}/{enemy_id}
GET /heroes
GET /enemies
GET /, /health
"""

from __future__ import annotations

import logging

from aiohttp import web

from rpg.combat.entities import Enemy, EnemyType, Hero
from rpg.combat.errors import (
    CombatError,
    EnemyAlreadyKilledError,
    EnemyNotFoundError,
    EnemyTypeMismatchError,
    HeroNotFoundError,
)
from rpg.combat_service import attempt_kill, get_all_enemies, get_all_heroes
from rpg.store import CombatStore

logger = logging.getLogger("rpgcombat")

STORE_KEY = web.AppKey("store", CombatStore)

_ERROR_STATUS = {
    HeroNotFoundError: 404,
    EnemyNotFoundError: 404,
    EnemyTypeMismatchError: 400,
    EnemyAlreadyKilledError: 409,
}


def _error_response(status: int, error: str, message: str) -> web.Response:
    return web.json_response({"statusCode": status, "error": error, "message": message}, status=status)


def _hero_json(hero: Hero) -> dict:
    return {
        "id": hero.id,
        "name": hero.name,
        "level": hero.level,
        "experience": hero.experience,
        "enemiesKilledAmount": hero.enemies_killed_amount,
        "createdAt": hero.created_at,
        "updatedAt": hero.updated_at,
    }


def _enemy_json(enemy: Enemy) -> dict:
    return {
        "id": enemy.id,
        "name": enemy.name,
        "level": enemy.level,
        "experience": enemy.experience,
        "enemyType": enemy.enemy_type.value,
        "killedByHeroId": enemy.killed_by_hero_id,
        "createdAt": enemy.created_at,
        "updatedAt": enemy.updated_at,
    }


async def health_check(request: web.Request) -> web.Response:
    return web.Response(text="OK", status=200)


async def kill_enemy_handler(request: web.Request) -> web.Response:
    hero_id = request.match_info["hero_id"]
    enemy_id = request.match_info["enemy_id"]
    raw_type = request.match_info["enemy_type"]

    try:
        enemy_type = EnemyType.parse(raw_type)
    except ValueError as e:
        return _error_response(400, "Bad Request", str(e))

    try:
        result = await attempt_kill(request.app[STORE_KEY], hero_id, enemy_id, enemy_type)
    except CombatError as e:
        status = _ERROR_STATUS.get(type(e), 400)
        return _error_response(status, type(e).__name__, str(e))
    except Exception:
        logger.exception("combat.kill failed: hero_id=%s enemy_id=%s", hero_id, enemy_id)
        return _error_response(500, "Internal Server Error", "An unexpected error occurred during combat")

    return web.json_response({"actionId": result.action_id})


async def list_heroes_handler(request: web.Request) -> web.Response:
    heroes = await get_all_heroes(request.app[STORE_KEY])
    return web.json_response([_hero_json(h) for h in heroes])


async def list_enemies_handler(request: web.Request) -> web.Response:
    enemies = await get_all_enemies(request.app[STORE_KEY])
    return web.json_response([_enemy_json(e) for e in enemies])


async def _close_store(app: web.Application) -> None:
    await app[STORE_KEY].close()


def create_app(store: CombatStore) -> web.Application:
    app = web.Application()
    app[STORE_KEY] = store
    app.router.add_get("/", health_check)
    app.router.add_get("/health", health_check)
    app.router.add_put("/combat/heroes/{hero_id}/kill/{enemy_type}/{enemy_id}", kill_enemy_handler)
    app.router.add_get("/heroes", list_heroes_handler)
    app.router.add_get("/enemies", list_enemies_handler)
    app.on_cleanup.append(_close_store)
    return app
