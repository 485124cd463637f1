"""
Token 配置加載與訪問
- 從 ENV SESSION_TOKEN_CONFIG_PATH 或默認 'session_token.json' 讀取 JSON 配置
- 每個 profile（例如 admin / user）各自擁有 secret、ttl_millis
- secret 優先級: ENV SESSION_TOKEN_<PROFILE>_SECRET > 配置文件 > ENV SESSION_TOKEN_SECRET > 默認 'change-me'
- 配置文件缺失或 JSON 無效: 記錄 WARNING，使用默認配置
- 字段類型或取值錯誤: 拋出 ConfigurationError
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "default"
DEFAULT_CONFIG_FILE = "session_token.json"

_DEFAULT_SECRET = "change-me"
_DEFAULT_TTL_MILLIS = 7_200_000  # 2 小時

_ENV_CONFIG_PATH = "SESSION_TOKEN_CONFIG_PATH"
_ENV_SECRET = "SESSION_TOKEN_SECRET"


class TokenProfile(BaseModel):
    secret: str = Field(..., description="簽名密鑰，任意長度但不可為空", repr=False)
    ttl_millis: int = Field(_DEFAULT_TTL_MILLIS, description="令牌有效期（毫秒）")

    @field_validator("secret")
    @classmethod
    def _secret_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("secret must not be empty")
        return v

    @field_validator("ttl_millis")
    @classmethod
    def _ttl_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("ttl_millis must be >= 0")
        return v


class TokenSettings(BaseModel):
    profiles: Dict[str, TokenProfile] = Field(default_factory=dict)


def _env_secret_name(profile: str) -> str:
    return f"SESSION_TOKEN_{profile.upper()}_SECRET"


def effective_config_path(path: Optional[str] = None) -> str:
    """返回有效的配置路徑：參數 > ENV SESSION_TOKEN_CONFIG_PATH > 默認文件。"""
    if path and str(path).strip():
        return str(path)
    env_path = os.environ.get(_ENV_CONFIG_PATH)
    if env_path and env_path.strip():
        return env_path
    return DEFAULT_CONFIG_FILE


def _read_config_file(path: str) -> Dict[str, Any]:
    if not os.path.isfile(path):
        logger.warning("Token config %s not found; using defaults", path)
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Failed to read token config %s: %s; using defaults", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Token config %s is not a JSON object; using defaults", path)
        return {}
    return data


def _apply_env_overrides(profiles: Dict[str, Any]) -> None:
    """按優先級填充每個 profile 的 secret（就地修改）。"""
    global_secret = os.environ.get(_ENV_SECRET)
    for name, raw in profiles.items():
        env_secret = os.environ.get(_env_secret_name(name))
        if env_secret:
            raw["secret"] = env_secret
        elif raw.get("secret") is None:
            if global_secret:
                raw["secret"] = global_secret
            else:
                logger.warning("Profile '%s' has no secret configured; using insecure default", name)
                raw["secret"] = _DEFAULT_SECRET


def load_settings(path: Optional[str] = None) -> TokenSettings:
    """
    加載 token 配置。
    文件格式: {"profiles": {"admin": {"secret": "...", "ttl_millis": 7200000}}}
    未配置任何 profile 時提供一個 'default' profile。
    """
    cfg_path = effective_config_path(path)
    data = _read_config_file(cfg_path)

    raw_profiles = data.get("profiles")
    if raw_profiles is None:
        raw_profiles = {}
    if not isinstance(raw_profiles, dict):
        raise ConfigurationError(f"'profiles' in {cfg_path} must be an object")
    if not raw_profiles:
        raw_profiles = {DEFAULT_PROFILE: {}}

    profiles: Dict[str, Any] = {}
    for name, raw in raw_profiles.items():
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Profile '{name}' in {cfg_path} must be an object")
        profiles[name] = dict(raw)
    _apply_env_overrides(profiles)

    try:
        settings = TokenSettings.model_validate({"profiles": profiles})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid token config {cfg_path}: {e}") from e

    logger.debug("Token config loaded from %s. profiles=%s", cfg_path, sorted(settings.profiles))
    return settings


def get_profile(settings: TokenSettings, name: str = DEFAULT_PROFILE) -> TokenProfile:
    """按名稱獲取 profile，不存在則拋出 ConfigurationError。"""
    profile = settings.profiles.get(name)
    if profile is None:
        raise ConfigurationError(
            f"Unknown token profile '{name}'; configured: {', '.join(sorted(settings.profiles)) or 'none'}"
        )
    return profile
