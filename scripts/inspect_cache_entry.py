#!/usr/bin/env python3
"""
Inspect a Drupal page cache entry in Redis.

Resolves a cache id to its Redis key, runs the same validity checks the page
cache service uses, and prints the verdict. Useful when a page keeps missing
the cache and it is unclear whether it expired, was flagged invalid, or had a
cache tag bumped.
"""

import argparse
import asyncio
import json
from typing import Optional
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import BaseConfig  # noqa: E402
from shared.errors import CorruptPayloadError  # noqa: E402
from service_pagecache.app.cache import DrupalCacheReader  # noqa: E402
from service_pagecache.app.store import create_store  # noqa: E402


async def inspect(
    *,
    cid: str,
    config: BaseConfig,
    include_payload: bool,
) -> dict:
    """Look up ``cid`` and return a JSON-friendly report."""
    store = create_store(config)
    reader = DrupalCacheReader(store, config.cid_template, page_bin=config.page_bin, tag_bin=config.tag_bin)
    try:
        report = {"cid": cid, "key": reader.page_key(cid)}
        try:
            result = await reader.inspect(cid)
        except CorruptPayloadError as exc:
            report.update({"verdict": "corrupt", "error": exc.message, "details": exc.details})
            return report

        report["verdict"] = result.verdict.value
        if include_payload and result.hit:
            report["payload"] = result.payload
        return report
    finally:
        await store.close()


def _parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    defaults = BaseConfig()
    parser = argparse.ArgumentParser(description="Inspect a Drupal page cache entry in Redis.")
    parser.add_argument("cid", help="Drupal cache id, e.g. the page URL")
    parser.add_argument("--redis-url", default=defaults.redis_url, help="Redis connection URL")
    parser.add_argument("--key-prefix", default=defaults.redis_key_prefix, help="Prefix Drupal adds to every Redis key")
    parser.add_argument("--template", default=defaults.cid_template, help="Cache id template with {bin} and {cid}")
    parser.add_argument("--payload", action="store_true", help="Print the decoded payload on a hit")
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    args = _parse_args(argv)
    config = BaseConfig(
        redis_url=args.redis_url,
        redis_key_prefix=args.key_prefix,
        cid_template=args.template,
    )
    try:
        report = asyncio.run(inspect(cid=args.cid, config=config, include_payload=args.payload))
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        print(f"[cache-inspect] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(report, indent=2))
    return 0 if report["verdict"] == "valid" else 2


if __name__ == "__main__":
    raise SystemExit(main())
