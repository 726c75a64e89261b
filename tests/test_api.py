from __future__ import annotations

import asyncio

from aiohttp import test_utils

from api import create_app
from rpg.combat.entities import EnemyType
from rpg.store import MemoryCombatStore
from tests.helpers.factories import make_enemy, make_hero


def _store() -> MemoryCombatStore:
    return MemoryCombatStore(
        heroes=[make_hero("hero-1", name="Aragorn the Brave"), make_hero("hero-2", name="Gimli Ironbeard")],
        enemies=[
            make_enemy("enemy-1", EnemyType.GOBLIN, name="Snaga the Sly", level=3),
            make_enemy("enemy-2", EnemyType.DRAGON, name="Smaug the Terrible", level=10),
        ],
    )


def _with_client(store, scenario):
    async def _main():
        async with test_utils.TestClient(test_utils.TestServer(create_app(store))) as client:
            return await scenario(client)

    return asyncio.run(_main())


def test_kill_returns_action_id():
    store = _store()

    async def scenario(client):
        resp = await client.put("/combat/heroes/hero-1/kill/GOBLIN/enemy-1")
        return resp.status, await resp.json()

    status, body = _with_client(store, scenario)

    assert status == 200
    assert body == {"actionId": "enemy-1"}


def test_error_statuses():
    store = _store()

    async def scenario(client):
        out = {}
        for name, path in [
            ("hero", "/combat/heroes/nobody/kill/GOBLIN/enemy-1"),
            ("enemy", "/combat/heroes/hero-1/kill/GOBLIN/nothing"),
            ("mismatch", "/combat/heroes/hero-1/kill/DRAGON/enemy-1"),
            ("bad_type", "/combat/heroes/hero-1/kill/ELF/enemy-1"),
        ]:
            resp = await client.put(path)
            out[name] = (resp.status, await resp.json())

        await client.put("/combat/heroes/hero-1/kill/GOBLIN/enemy-1")
        resp = await client.put("/combat/heroes/hero-2/kill/GOBLIN/enemy-1")
        out["killed"] = (resp.status, await resp.json())
        return out

    out = _with_client(store, scenario)

    assert out["hero"][0] == 404
    assert out["hero"][1]["message"] == "Hero with ID nobody not found"
    assert out["enemy"][0] == 404
    assert out["mismatch"][0] == 400
    assert out["mismatch"][1]["error"] == "EnemyTypeMismatchError"
    assert "DRAGON" in out["mismatch"][1]["message"]
    assert "GOBLIN" in out["mismatch"][1]["message"]
    assert out["bad_type"][0] == 400
    assert out["killed"][0] == 409
    assert out["killed"][1]["message"] == "Enemy enemy-1 has already been killed"


def test_unexpected_failure_is_a_500():
    store = _store()
    store.fail_commit_with = RuntimeError("Database connection failed")

    async def scenario(client):
        resp = await client.put("/combat/heroes/hero-1/kill/GOBLIN/enemy-1")
        return resp.status, await resp.json()

    status, body = _with_client(store, scenario)

    assert status == 500
    assert body["message"] == "An unexpected error occurred during combat"


def test_concurrent_requests_have_one_winner():
    store = _store()

    async def scenario(client):
        responses = await asyncio.gather(
            client.put("/combat/heroes/hero-1/kill/DRAGON/enemy-2"),
            client.put("/combat/heroes/hero-2/kill/DRAGON/enemy-2"),
        )
        return sorted(r.status for r in responses)

    assert _with_client(store, scenario) == [200, 409]


def test_listings_use_camel_case():
    store = _store()

    async def scenario(client):
        await client.put("/combat/heroes/hero-2/kill/DRAGON/enemy-2")
        heroes = await (await client.get("/heroes")).json()
        enemies = await (await client.get("/enemies")).json()
        health = await (await client.get("/health")).text()
        return heroes, enemies, health

    heroes, enemies, health = _with_client(store, scenario)

    created_at = heroes[0].pop("createdAt")
    updated_at = heroes[0].pop("updatedAt")
    assert heroes[0] == {
        "id": "hero-2",
        "name": "Gimli Ironbeard",
        "level": 2,
        "experience": 0,
        "enemiesKilledAmount": 1,
    }
    assert created_at and updated_at >= created_at
    assert {"createdAt", "updatedAt"} <= set(enemies[0])
    assert [e["id"] for e in enemies] == ["enemy-2", "enemy-1"]
    assert enemies[0]["killedByHeroId"] == "hero-2"
    assert enemies[0]["enemyType"] == "DRAGON"
    assert health == "OK"
