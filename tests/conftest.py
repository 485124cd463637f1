import json
import os
import sys

import pytest

# 确保项目根目录在 sys.path 中
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from session_token.logging_config import get_colorful_logger  # noqa: E402


@pytest.fixture(scope="session")
def logger():
    """提供一个带彩色格式的测试级别 logger"""
    return get_colorful_logger("tests")


@pytest.fixture
def clock(monkeypatch):
    """
    冻结 session_token.jwt.now_ms，返回一个可推进的时钟
    使用方式:
        clock.set(1_700_000_000_000); clock.advance(1500)
    """
    import session_token.jwt as jwt_lib

    class _Clock:
        def __init__(self):
            self.ms = 1_700_000_000_000

        def set(self, ms: int):
            self.ms = ms

        def advance(self, ms: int):
            self.ms += ms

    c = _Clock()
    monkeypatch.setattr(jwt_lib, "now_ms", lambda: c.ms)
    return c


@pytest.fixture
def clean_env(monkeypatch):
    """清除可能干扰测试的 SESSION_TOKEN_* 环境变量"""
    for k in list(os.environ):
        if k.startswith("SESSION_TOKEN_"):
            monkeypatch.delenv(k, raising=False)
    return monkeypatch


@pytest.fixture
def make_config(tmp_path):
    """
    在临时目录中写入 token 配置文件的工厂方法
    使用方式:
        path = make_config({"profiles": {"admin": {"secret": "x"}}})
    """
    def _mk(content, name: str = "session_token.json"):
        p = tmp_path / name
        if isinstance(content, str):
            p.write_text(content, encoding="utf-8")
        else:
            p.write_text(json.dumps(content), encoding="utf-8")
        return str(p)
    return _mk
