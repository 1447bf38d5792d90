#!/usr/bin/env python3
"""Look up lottery result images on a deployed site.

Uses the same resolver as the site: the Remote Index when one is configured, otherwise
probing candidate filenames under the assets base URL.

Examples:
  result-scan --base-url https://example.org/ --latest
  result-scan --base-url https://example.org/ --date 12-08-2025 --time 8pm
  result-scan --base-url https://example.org/ --index-url https://example.org/api/get-images --all
  result-scan --base-url https://example.org/ --watch --interval 120
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from typing import List, Optional

from ..config import Settings
from ..drawlog.models import ParsedResult
from ..drawlog.parser import normalize_slot, parse_date_fragment
from ..resolver import ResultResolver

logger = logging.getLogger("resultweb")


def _line(r: ParsedResult, resolver: ResultResolver) -> str:
    return f"{r.date.isoformat()}  {r.display_time:>5}  {r.filename}  {resolver.display_url(r)}"


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    resolver = ResultResolver.from_settings(settings)
    try:
        if args.date:
            d = parse_date_fragment(args.date)
            if d is None:
                print(f"Invalid --date {args.date!r} (expected DD-MM-YYYY)", file=sys.stderr)
                return 2
            if args.time:
                slot = normalize_slot(args.time)
                if slot is None:
                    print(f"Invalid --time {args.time!r} (expected e.g. 8pm)", file=sys.stderr)
                    return 2
                found = await resolver.choose_datetime(d, slot)
            else:
                found = await resolver.choose_date(d)
            if found is None:
                print(f"No result for {args.date} {args.time or 'any time'}")
                return 1
            print(_line(found, resolver))
            print(f"download as: {resolver.download_filename(found)}")
            return 0

        if args.all:
            results: List[ParsedResult] = await resolver.all_available_results()
            for r in results:
                print(_line(r, resolver))
            print(f"{len(results)} result(s)")
            return 0 if results else 1

        if args.watch:
            await resolver.start()
            await resolver.wait_background()
            last: Optional[str] = None
            stop = asyncio.Event()
            task = asyncio.create_task(resolver.auto_refresh(stop, args.interval))
            try:
                while True:
                    cur = resolver.current
                    if cur is not None and cur.filename != last:
                        print(_line(cur, resolver), flush=True)
                        last = cur.filename
                    await asyncio.sleep(1.0)
            finally:
                stop.set()
                await task

        # --latest (default)
        fast = await resolver.start()
        if fast is not None:
            print(f"fast path: {_line(fast, resolver)}")
        await resolver.wait_background()
        if resolver.current is None:
            print("No lottery results found")
            return 1
        print(_line(resolver.current, resolver))
        return 0
    finally:
        await resolver.aclose()


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Find lottery result images on a site.")
    p.add_argument("--base-url", default="", help="Base URL result filenames are relative to (ASSETS_BASE_URL)")
    p.add_argument("--index-url", default="", help="Remote index endpoint (REMOTE_INDEX_URL); blank = probe only")
    mode = p.add_mutually_exclusive_group()
    mode.add_argument("--latest", action="store_true", help="Newest result (default)")
    mode.add_argument("--date", default="", help="DD-MM-YYYY: best result of that day")
    mode.add_argument("--all", action="store_true", help="List every result found")
    mode.add_argument("--watch", action="store_true", help="Keep polling and print upgrades")
    p.add_argument("--time", default="", help="With --date: exact draw slot, e.g. 8pm")
    p.add_argument("--interval", type=float, default=None, help="With --watch: seconds between refreshes")
    p.add_argument("--lookback", type=int, default=None, help="Background scan window in days")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = p.parse_args(argv)
    if args.time and not args.date:
        p.error("--time requires --date")

    settings = Settings.from_env()
    overrides = {}
    if args.base_url:
        overrides["assets_base_url"] = args.base_url.strip()
    if args.index_url:
        overrides["remote_index_url"] = args.index_url.strip()
    if args.lookback is not None:
        overrides["background_lookback_days"] = max(1, args.lookback)
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
