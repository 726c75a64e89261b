from __future__ import annotations

import logging

import pytest

import config
from rpg.combat.entities import Enemy, EnemyType, Hero
from rpg.combat.errors import EnemyAlreadyKilledError
from rpg.combat.kill import kill_enemy
from tests.helpers.factories import make_enemy, make_hero


def test_kill_marks_enemy_and_credits_hero():
    hero = make_hero()
    enemy = make_enemy(level=3)

    outcome = kill_enemy(hero, enemy)

    assert enemy.killed_by_hero_id == "hero-1"
    assert not enemy.is_alive
    assert hero.enemies_killed_amount == 1
    assert hero.enemies_killed == ["enemy-1"]
    assert hero.experience == 30
    assert hero.level == 1
    assert outcome.experience_gained == 30
    assert outcome.leveled_up is False


def test_level_ten_enemy_levels_up_fresh_hero():
    hero = make_hero()

    outcome = kill_enemy(hero, make_enemy(level=10))

    assert outcome.leveled_up is True
    assert (hero.level, hero.experience) == (2, 0)


def test_level_zero_enemy_still_counts_as_a_kill():
    hero = make_hero()
    enemy = make_enemy(level=0)

    outcome = kill_enemy(hero, enemy)

    assert outcome.experience_gained == 0
    assert hero.experience == 0
    assert hero.enemies_killed_amount == 1
    assert enemy.killed_by_hero_id == hero.id


def test_experience_accumulates_over_kills():
    hero = make_hero()

    for i, level in enumerate([3, 2, 4]):
        kill_enemy(hero, make_enemy(f"enemy-{i}", level=level))

    assert (hero.level, hero.experience) == (1, 90)
    assert hero.enemies_killed_amount == 3
    assert hero.enemies_killed == ["enemy-0", "enemy-1", "enemy-2"]


def test_hero_parked_at_negative_experience_needs_more_gain():
    hero = make_hero(experience=-50)

    outcome = kill_enemy(hero, make_enemy(level=10))

    assert outcome.leveled_up is False
    assert (hero.level, hero.experience) == (1, 50)


def test_killed_marker_is_never_overwritten():
    hero = make_hero("hero-2")
    enemy = make_enemy(killed_by_hero_id="hero-1")

    with pytest.raises(EnemyAlreadyKilledError) as excinfo:
        kill_enemy(hero, enemy)

    assert enemy.killed_by_hero_id == "hero-1"
    assert excinfo.value.killed_by_hero_id == "hero-1"
    assert hero.enemies_killed_amount == 0
    assert hero.experience == 0


def test_enemy_levels_with_same_rule():
    enemy = make_enemy(level=1, experience=0)

    assert enemy.gain_experience(350) is True
    assert (enemy.level, enemy.experience) == (3, 50)


@pytest.mark.parametrize("raw", ["DRAGON", "dragon", " Dragon ", EnemyType.DRAGON])
def test_enemy_type_parse_accepts_names(raw):
    assert EnemyType.parse(raw) is EnemyType.DRAGON


def test_enemy_type_parse_rejects_unknown():
    with pytest.raises(ValueError):
        EnemyType.parse("ELF")


def test_rows_use_schema_columns():
    hero = Hero.from_row(
        {
            "id": "h1",
            "name": "Aragorn the Brave",
            "level": 5,
            "experience": 250,
            "enemies_killed_amount": 2,
            "enemies_killed": [{"id": "e1"}, {"id": "e2"}],
        }
    )
    enemy = Enemy.from_row(
        {"id": "e1", "name": "Smaug", "enemy_type": "DRAGON", "level": 10, "experience": 500, "killed_by_hero_id": "h1"}
    )

    assert hero.enemies_killed == ["e1", "e2"]
    assert "enemies_killed" not in hero.to_row()
    assert hero.to_row()["enemies_killed_amount"] == 2
    assert enemy.enemy_type is EnemyType.DRAGON
    assert enemy.to_row() == {
        "id": "e1",
        "name": "Smaug",
        "enemy_type": "DRAGON",
        "level": 10,
        "experience": 500,
        "killed_by_hero_id": "h1",
        "created_at": None,
        "updated_at": None,
    }


def test_verbose_debug_logs_the_kill(monkeypatch, caplog):
    monkeypatch.setattr(config, "VERBOSE_DEBUG", True)
    hero = make_hero()
    enemy = make_enemy(level=4)

    with caplog.at_level(logging.DEBUG, logger="rpgcombat"):
        kill_enemy(hero, enemy)

    assert any("combat.kill_enemy: hero_id=hero-1 enemy_id=enemy-1" in r.getMessage() for r in caplog.records)


def test_kill_is_silent_without_verbose_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="rpgcombat"):
        kill_enemy(make_hero(), make_enemy())

    assert not [r for r in caplog.records if r.getMessage().startswith("combat.kill_enemy")]
