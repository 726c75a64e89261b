#!/usr/bin/env python3
"""
プロジェクトセットアップ検証スクリプト
"""
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent


def check_env_vars(backend):
    """環境変数の確認"""
    required_vars = ["SUPABASE_URL", "SUPABASE_KEY"] if backend == "supabase" else []
    missing = []

    for var in required_vars:
        value = os.getenv(var)
        if not value or value.startswith("placeholder"):
            missing.append(var)

    return missing


def check_files():
    """必須ファイルの確認"""
    required_files = [
        "main.py",
        "api.py",
        "config.py",
        "db.py",
        "db_http.py",
        "rpg/store.py",
        "rpg/combat_service.py",
        "sql/schema.sql",
        "pyproject.toml",
    ]

    return [f for f in required_files if not (ROOT / f).exists()]


if __name__ == "__main__":
    print("🔍 プロジェクトセットアップ検証")
    print("=" * 50)

    missing_files = check_files()
    if missing_files:
        print(f"❌ 不足ファイル: {', '.join(missing_files)}")
        sys.exit(1)
    print("✅ すべての必須ファイルが存在します")

    import config

    backend = config.STORE_BACKEND
    print(f"ℹ️ STORE_BACKEND={backend}")
    if backend not in ("supabase", "memory"):
        print("❌ STORE_BACKEND は supabase / memory のどちらかを指定してください")
        sys.exit(1)

    missing_vars = check_env_vars(backend)
    if missing_vars:
        print(f"⚠️  未設定の環境変数: {', '.join(missing_vars)}")
        print("\n📋 次のステップ:")
        print("1. `.env` もしくはデプロイ先の環境変数に以下を追加してください:")
        for var in missing_vars:
            print(f"   - {var}")
        print("2. sql/schema.sql を Supabase の SQL editor で実行してください")
        sys.exit(0)

    if backend == "supabase":
        try:
            config.validate_supabase_settings()
        except ValueError as e:
            print(str(e))
            sys.exit(1)
    print("✅ 環境変数は問題ありません")

    print("\n✅ プロジェクトは実行可能です！")
    print("🚀 'python main.py' で起動できます")
