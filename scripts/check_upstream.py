#!/usr/bin/env python3
"""
Check every upstream endpoint the chat gateway depends on.

Runs the same read-through cache path the service uses on startup warm-up,
against a throwaway in-memory cache, and prints which endpoints answered.
Useful from a workstation or CI job before deploying a base URL change.
"""

import argparse
import asyncio
import json
from pathlib import Path
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from service_chatbot.app.adapters.metaforge_client import MetaForgeClient, DEFAULT_BASE_URL  # noqa: E402
from service_chatbot.app.caching.cache_manager import CacheManager, UPSTREAM_ENDPOINTS  # noqa: E402
from service_chatbot.app.caching.ttl_cache import TTLCache  # noqa: E402


async def check_endpoints(*, base_url: str, timeout_ms: int, only: list, transport=None) -> dict:
    """Fetch each endpoint once and return the warm summary plus payload sizes."""
    upstream = MetaForgeClient(base_url, timeout_ms, transport=transport)
    manager = CacheManager(TTLCache(), upstream, single_flight=False)
    plan = [entry for entry in UPSTREAM_ENDPOINTS if not only or entry[1] in only]

    try:
        summary = await manager.warm_cache(plan)
    finally:
        await upstream.close()

    sizes = {}
    for key in summary["warmed"]:
        payload = manager.cache.get(key)
        if isinstance(payload, dict):
            payload = payload.get("data")
        sizes[key] = len(payload) if isinstance(payload, list) else None
    summary["sizes"] = sizes
    return summary


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check the MetaForge endpoints used by the chat gateway.")
    parser.add_argument("--base-url", default=os.getenv("METAFORGE_BASE_URL", DEFAULT_BASE_URL), help="Upstream API base URL")
    parser.add_argument("--timeout-ms", type=int, default=int(os.getenv("FETCH_TIMEOUT_MS", 5000)), help="Per-request time bound")
    parser.add_argument("--only", action="append", default=[], help="Restrict to a cache key (repeatable), e.g. --only quests")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    try:
        summary = asyncio.run(check_endpoints(base_url=args.base_url, timeout_ms=args.timeout_ms, only=args.only))
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[check-upstream] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 0 if not summary["errors"] else 2


if __name__ == "__main__":
    raise SystemExit(main())
