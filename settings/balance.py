"""Balance settings.

経験値・レベルアップの係数を集約します。
The same numbers are baked into sql/schema.sql (kill_enemy); keep both in sync.
"""

from __future__ import annotations

# レベルアップに必要なEXP = level * LEVEL_EXP_FACTOR
LEVEL_EXP_FACTOR: int = 100

# 撃破時に得るEXP = enemy.level * KILL_EXP_PER_ENEMY_LEVEL
KILL_EXP_PER_ENEMY_LEVEL: int = 10
