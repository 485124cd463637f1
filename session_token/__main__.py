"""
調試工具：使用配置好的 profile 手動生成或解析 token

    python -m session_token issue --profile admin --claim userId=17
    python -m session_token verify <token> --profile admin
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .codec import TokenCodec
from .config import DEFAULT_PROFILE, get_profile, load_settings
from .errors import TokenError
from .logging_config import setup_colorful_logging


def _parse_claims(items: List[str]) -> Dict[str, Any]:
    """解析 k=v 形式的 claim；值優先按 JSON 解析，否則作為字符串。"""
    claims: Dict[str, Any] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid claim '{item}', expected key=value")
        try:
            claims[key] = json.loads(value)
        except ValueError:
            claims[key] = value
    return claims


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="session_token", description="Issue or inspect session tokens")
    parser.add_argument("--config", default=None, help="token config JSON path")
    parser.add_argument("--profile", default=DEFAULT_PROFILE, help="token profile name")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--plain-log", action="store_true", help="one-line log records instead of rich output")
    sub = parser.add_subparsers(dest="command", required=True)

    p_issue = sub.add_parser("issue", help="issue a token")
    p_issue.add_argument("--ttl", type=int, default=None, help="TTL in milliseconds (defaults to the profile's)")
    p_issue.add_argument("--claim", action="append", default=[], metavar="KEY=VALUE")

    p_verify = sub.add_parser("verify", help="verify a token and print its claims")
    p_verify.add_argument("token")
    p_verify.add_argument("--leeway", type=float, default=0, help="allowed clock skew in seconds")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = setup_colorful_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        name="session_token",
        use_rich=not args.plain_log,
    )

    try:
        profile = get_profile(load_settings(args.config), args.profile)
        codec = TokenCodec.from_profile(profile)
        if args.command == "issue":
            if args.ttl is not None:
                codec = TokenCodec(profile.secret, args.ttl)
            token = codec.issue(_parse_claims(args.claim))
            print(token)
        else:
            claims = codec.verify(args.token, leeway_seconds=args.leeway)
            print(json.dumps(claims, indent=2, ensure_ascii=False))
    except TokenError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    except ValueError as e:
        logger.error("%s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
