"""設定の読み込み (.env + 環境変数)"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from stockrecon.inventory.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT


@dataclass(frozen=True)
class Settings:
    """CLI / クライアント共通の設定値"""
    api_base_url: str = DEFAULT_BASE_URL
    api_timeout: float = DEFAULT_TIMEOUT
    api_token: Optional[str] = None
    actor_id: int = 1
    log_level: str = "INFO"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """.env を読み込んだうえで環境変数から Settings を作る。

    既に設定済みの環境変数は .env で上書きしない。

    Args:
        env_file: .env のパス (省略時はカレントから探索)

    Raises:
        ValueError: 数値項目が不正
    """
    load_dotenv(env_file)

    log_level = (os.getenv("STOCKRECON_LOG_LEVEL") or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"STOCKRECON_LOG_LEVEL が不正です: {log_level!r}")

    return Settings(
        api_base_url=os.getenv("STOCKRECON_API_BASE_URL") or DEFAULT_BASE_URL,
        api_timeout=_env_number("STOCKRECON_API_TIMEOUT", float, DEFAULT_TIMEOUT),
        api_token=os.getenv("STOCKRECON_API_TOKEN") or None,
        actor_id=_env_number("STOCKRECON_ACTOR_ID", int, 1),
        log_level=log_level,
    )


def _env_number(name: str, cast, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"{name} が不正です: {raw!r}") from None
