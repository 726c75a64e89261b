"""Runtime settings (safe to import).

このモジュールは SUPABASE_URL/SUPABASE_KEY のような必須環境変数に依存しないため、
どのタイミングでも安全に import できます。
"""

from __future__ import annotations

import os
from typing import Optional


def _safe_int_env(name: str, default: Optional[int] = None) -> Optional[int]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except Exception:
        return default


# -------------------------
# HTTP server
# -------------------------

HTTP_HOST: str = (os.getenv("HTTP_HOST") or "0.0.0.0").strip()

# PaaS 側は PORT を渡してくることが多いので fallback として見る
HTTP_PORT: int = _safe_int_env("HTTP_PORT") or _safe_int_env("PORT") or 3000
