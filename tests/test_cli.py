import json
import logging

import pytest

from session_token import __main__ as cli
from session_token import jwt as jwt_lib
from session_token.__main__ import _parse_claims, main


@pytest.fixture
def cfg_path(clean_env, make_config):
    return make_config({
        "profiles": {
            "admin": {"secret": "itcast", "ttl_millis": 7200000},
            "user": {"secret": "itheima", "ttl_millis": 60000},
        }
    })


def test_issue_prints_verifiable_token(cfg_path, capsys):
    rc = main(["--config", cfg_path, "--profile", "admin", "issue", "--claim", "empId=1", "--claim", "name=admin"])
    assert rc == 0
    token = capsys.readouterr().out.strip()
    claims = jwt_lib.verify("itcast", token)
    assert claims["empId"] == 1
    assert claims["name"] == "admin"


def test_verify_prints_claims(cfg_path, capsys):
    token = jwt_lib.issue("itheima", 60000, {"userId": 17})
    rc = main(["--config", cfg_path, "--profile", "user", "verify", token])
    assert rc == 0
    claims = json.loads(capsys.readouterr().out)
    assert claims["userId"] == 17
    assert "exp" in claims


def test_verify_with_wrong_profile_fails(cfg_path, capsys):
    token = jwt_lib.issue("itheima", 60000, {"userId": 17})
    rc = main(["--config", cfg_path, "--profile", "admin", "verify", token])
    assert rc == 1
    assert capsys.readouterr().out == ""


def test_issue_with_ttl_override(cfg_path, capsys, clock):
    rc = main(["--config", cfg_path, "--profile", "user", "issue", "--ttl", "5000"])
    assert rc == 0
    token = capsys.readouterr().out.strip()
    assert jwt_lib.verify("itheima", token)["exp"] == (clock.ms + 5000) / 1000


def test_unknown_profile_fails(cfg_path):
    assert main(["--config", cfg_path, "--profile", "nobody", "issue"]) == 1


def test_bad_claim_argument(cfg_path):
    assert main(["--config", cfg_path, "--profile", "admin", "issue", "--claim", "oops"]) == 2


def test_parse_claims_values():
    assert _parse_claims(["a=1", "b=true", "c=hello", "d=[1,2]", "e="]) == {
        "a": 1, "b": True, "c": "hello", "d": [1, 2], "e": "",
    }


@pytest.mark.parametrize("argv, use_rich", [
    (["issue"], True),
    (["--plain-log", "issue"], False),
])
def test_plain_log_flag_selects_handler(cfg_path, capsys, monkeypatch, argv, use_rich):
    calls = []

    def fake_setup(**kwargs):
        calls.append(kwargs)
        return logging.getLogger("session_token")

    monkeypatch.setattr(cli, "setup_colorful_logging", fake_setup)
    assert main(["--config", cfg_path, "--profile", "admin"] + argv) == 0
    assert calls == [{"level": logging.INFO, "name": "session_token", "use_rich": use_rich}]
