"""Supabase (PostgREST) access for heroes / enemies.

Rows are returned as plain dicts; rpg.store turns them into domain objects.
The kill commit goes through the `kill_enemy` SQL function (sql/schema.sql)
so both rows change in one transaction.
"""

from __future__ import annotations

from typing import Any, List, Optional

import httpx

import config
from db_http import (
    _extract_postgrest_error,
    _format_httpx_error,
    _get_headers,
    _request_with_retry,
    logger,
)
from rpg.combat.errors import HeroNotFoundError

HERO_SELECT = (
    "id,name,level,experience,enemies_killed_amount,created_at,updated_at,"
    "enemies_killed:enemies(id)"
)
ENEMY_SELECT = "id,name,enemy_type,level,experience,killed_by_hero_id,created_at,updated_at"

# PL/pgSQL `raise ... using errcode = 'no_data_found'`
_PG_NO_DATA_FOUND = "P0002"
# foreign_key_violation on enemies.killed_by_hero_id
_PG_FOREIGN_KEY_VIOLATION = "23503"
# invalid_text_representation: e.g. a non-uuid id in an eq. filter
_PG_INVALID_TEXT = "22P02"


def _is_invalid_id_error(exc: Exception) -> bool:
    data = _extract_postgrest_error(exc)
    return bool(data) and data.get("code") == _PG_INVALID_TEXT


def _table_url(table: str) -> str:
    return f"{config.SUPABASE_URL}/rest/v1/{table}"


async def get_hero(hero_id: str) -> Optional[dict]:
    """ヒーローを取得（撃破済みの敵IDを join で同梱）"""
    params = {"id": f"eq.{hero_id}", "select": HERO_SELECT}

    if config.VERBOSE_DEBUG:
        logger.debug("db.get_hero: hero_id=%s", hero_id)
    try:
        response = await _request_with_retry(
            "GET",
            _table_url("heroes"),
            headers=_get_headers(),
            params=params,
            op="db.get_hero",
            context={"hero_id": hero_id},
        )
        data = response.json()
        if config.VERBOSE_DEBUG:
            logger.debug("db.get_hero: hero_id=%s found=%s", hero_id, bool(data))
        return data[0] if data else None
    except httpx.HTTPStatusError as e:
        if _is_invalid_id_error(e):
            # no row can match an id that is not a uuid
            return None
        logger.warning("db.get_hero failed: hero_id=%s err=%s", hero_id, _format_httpx_error(e))
        raise
    except Exception as e:
        logger.warning("db.get_hero failed: hero_id=%s err=%s", hero_id, _format_httpx_error(e))
        raise


async def get_enemy(enemy_id: str) -> Optional[dict]:
    """敵を取得"""
    params = {"id": f"eq.{enemy_id}", "select": ENEMY_SELECT}

    if config.VERBOSE_DEBUG:
        logger.debug("db.get_enemy: enemy_id=%s", enemy_id)
    try:
        response = await _request_with_retry(
            "GET",
            _table_url("enemies"),
            headers=_get_headers(),
            params=params,
            op="db.get_enemy",
            context={"enemy_id": enemy_id},
        )
        data = response.json()
        if config.VERBOSE_DEBUG:
            logger.debug("db.get_enemy: enemy_id=%s found=%s", enemy_id, bool(data))
        return data[0] if data else None
    except httpx.HTTPStatusError as e:
        if _is_invalid_id_error(e):
            # no row can match an id that is not a uuid
            return None
        logger.warning("db.get_enemy failed: enemy_id=%s err=%s", enemy_id, _format_httpx_error(e))
        raise
    except Exception as e:
        logger.warning("db.get_enemy failed: enemy_id=%s err=%s", enemy_id, _format_httpx_error(e))
        raise


async def list_heroes() -> List[dict]:
    """全ヒーロー（level desc, 撃破数 desc, name asc）"""
    response = await _request_with_retry(
        "GET",
        _table_url("heroes"),
        headers=_get_headers(),
        params={"select": HERO_SELECT, "order": "level.desc,enemies_killed_amount.desc,name.asc"},
        op="db.list_heroes",
    )
    return response.json()


async def list_enemies() -> List[dict]:
    """全敵（type asc, level desc, name asc）"""
    response = await _request_with_retry(
        "GET",
        _table_url("enemies"),
        headers=_get_headers(),
        params={"select": ENEMY_SELECT, "order": "enemy_type.asc,level.desc,name.asc"},
        op="db.list_enemies",
    )
    return response.json()


async def commit_kill(hero_id: str, enemy_id: str, experience: int) -> bool:
    """撃破を1トランザクションで確定する。

    True: committed. False: the enemy's killed_by_hero_id was no longer empty
    at commit time (lost the race). Never retried: if the response is lost
    after a commit, a replay would report a conflict for the winner.
    """
    payload: dict[str, Any] = {
        "p_hero_id": hero_id,
        "p_enemy_id": enemy_id,
        "p_experience": int(experience),
    }
    ctx = {"hero_id": hero_id, "enemy_id": enemy_id, "experience": experience}

    if config.VERBOSE_DEBUG:
        logger.debug("db.commit_kill: %s", ctx)
    try:
        response = await _request_with_retry(
            "POST",
            f"{config.SUPABASE_URL}/rest/v1/rpc/kill_enemy",
            headers=_get_headers(),
            json=payload,
            op="db.commit_kill",
            context=ctx,
            retry=False,
        )
    except httpx.HTTPStatusError as e:
        data = _extract_postgrest_error(e)
        if data and data.get("code") in (_PG_NO_DATA_FOUND, _PG_FOREIGN_KEY_VIOLATION):
            # hero row vanished between read and commit; the function rolled back
            raise HeroNotFoundError(hero_id) from e
        raise

    committed = response.json() is True
    if config.VERBOSE_DEBUG:
        logger.debug("db.commit_kill: %s committed=%s", ctx, committed)
    return committed
