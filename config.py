import os
from pathlib import Path
from dotenv import load_dotenv, find_dotenv
from urllib.parse import urlparse

# ローカル開発用: `.env` があれば読み込む（デプロイ環境では通常 `.env` を置かない想定）
# 1) このファイルと同じディレクトリの `.env`
# 2) それが無ければ、cwd から親ディレクトリを辿って `.env` を探索
env_path = Path(__file__).resolve().parent / ".env"
if env_path.exists():
    load_dotenv(dotenv_path=str(env_path), override=False)
else:
    found = find_dotenv(usecwd=True)
    if found:
        load_dotenv(dotenv_path=found, override=False)


def _safe_float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except Exception:
        return default


def _safe_int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _safe_bool_env(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


# -------------------------
# Store backend
# -------------------------
# supabase: Postgres (PostgREST) に永続化
# memory:   プロセス内のメモリストア（ローカル確認・テスト用）
STORE_BACKEND = (os.getenv("STORE_BACKEND") or "supabase").strip().lower()

SUPABASE_URL = (os.getenv("SUPABASE_URL") or "").strip()
SUPABASE_KEY = (os.getenv("SUPABASE_KEY") or "").strip()

SUPABASE_HTTP_TIMEOUT = _safe_float_env("SUPABASE_HTTP_TIMEOUT", 30.0)
SUPABASE_RETRY_MAX_ATTEMPTS = _safe_int_env("SUPABASE_RETRY_MAX_ATTEMPTS", 3)
SUPABASE_RETRY_BASE_DELAY = _safe_float_env("SUPABASE_RETRY_BASE_DELAY", 0.5)
SUPABASE_RETRY_MAX_DELAY = _safe_float_env("SUPABASE_RETRY_MAX_DELAY", 3.0)

# -------------------------
# Logging
# -------------------------
LOG_LEVEL = (os.getenv("LOG_LEVEL") or "INFO").strip().upper()

# per-call の詳細ログ（db.*, combat.*）を出すかどうか
VERBOSE_DEBUG = _safe_bool_env("VERBOSE_DEBUG", False)

if SUPABASE_URL and not SUPABASE_URL.startswith(("http://", "https://")):
    # 例: your-project.supabase.co を https://your-project.supabase.co に正規化
    SUPABASE_URL = "https://" + SUPABASE_URL.lstrip("/")
SUPABASE_URL = SUPABASE_URL.rstrip("/")


def _looks_like_jwt(value: str) -> bool:
    # JWTっぽい: "eyJ" で始まり、ドット区切りが2つ以上
    return value.startswith("eyJ") and value.count(".") >= 2


def validate_supabase_settings(url: str | None = None, key: str | None = None) -> None:
    """Raise ValueError with a readable hint if the Supabase settings are unusable.

    Called when the supabase backend is built (not at import) so that the
    memory backend runs without credentials.
    """
    url = SUPABASE_URL if url is None else url
    key = SUPABASE_KEY if key is None else key

    if not url or not key:
        raise ValueError(
            "❌ 環境変数 SUPABASE_URL と SUPABASE_KEY を設定してください\n"
            "例) SUPABASE_URL=https://xxxx.supabase.co\n"
            "    SUPABASE_KEY=xxxxxxxx\n"
            "(ローカル確認だけなら STORE_BACKEND=memory でも起動できます)"
        )

    if any(c in key for c in (" ", "\t", "\n")):
        raise ValueError("❌ SUPABASE_KEY に空白/改行が含まれています。`.env` の値を1行にして下さい")

    if _looks_like_jwt(key) and len(key) < 80:
        raise ValueError(
            "❌ SUPABASE_KEY が短すぎます（途中で切れている可能性）。`.env` で改行されていないか確認してください"
        )

    if any(c in url for c in (" ", "\t", "\n")):
        raise ValueError("❌ SUPABASE_URL に空白/改行が含まれています。`.env` の値を確認してください")

    if _looks_like_jwt(url):
        raise ValueError(
            "❌ SUPABASE_URL がURLではなくKEY(JWT)っぽい値です。SUPABASE_URL と SUPABASE_KEY を入れ替えていませんか？"
        )

    if key.startswith(("http://", "https://")):
        raise ValueError(
            "❌ SUPABASE_KEY がURLっぽい値です。SUPABASE_URL と SUPABASE_KEY を入れ替えていませんか？"
        )

    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"❌ SUPABASE_URL の形式が不正です: {url!r}")
