#!/usr/bin/env python3
"""
PrintDesk CLI

Operator entry point for the PrintDesk background runtime.

Commands:

1) serve
   - Start the local API server (commands + event stream) with uvicorn.

2) locate
   - Probe the candidate directories and print the path of the print tool
     (SumatraPDF-<version>.exe by default).

3) print-summary
   - Run the "print-summary" command once through the command registry
     and report the structured result.

4) logs
   - Print the most recent log entries from today's log file.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on sys.path when running as a script
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from configs.settings import settings
from core.locator.executable_locator import ExecutableLocator, default_candidate_dirs
from exceptions.exceptions import LocatorNotFoundException
from runtime.context import PRINT_SUMMARY_CHANNEL, AppContext
from runtime.store.log_store import LogStore


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


def cmd_serve(host: str, port: int) -> int:
    """Run the API server until interrupted."""
    import uvicorn

    print(f"[PrintDesk] Starting runtime on http://{host}:{port}")
    uvicorn.run("runtime.api.server:app", host=host, port=port)
    return 0


# ---------------------------------------------------------------------------
# locate
# ---------------------------------------------------------------------------


def cmd_locate(extra_dirs: List[str]) -> int:
    """Print the resolved tool path, or the directories that were searched."""
    locator = ExecutableLocator(tool_name=settings.tool_name)
    candidates = [Path(d) for d in extra_dirs] + default_candidate_dirs(settings)

    print(f"[PrintDesk] Searching for {settings.tool_name}...")
    try:
        path = locator.locate(candidates)
    except LocatorNotFoundException as e:
        print(f"[PrintDesk] ✗ {e}")
        return 1

    print(f"[PrintDesk] ✓ Found {path}")
    return 0


# ---------------------------------------------------------------------------
# print-summary
# ---------------------------------------------------------------------------


async def _dispatch_print_summary(printer: Optional[str], keep_file: bool) -> dict:
    context = AppContext.from_settings(settings)
    context.start()
    try:
        args = {"cleanup": not keep_file}
        if printer:
            args["printer"] = printer
        result = await context.registry.dispatch(PRINT_SUMMARY_CHANNEL, args)
        return result.model_dump()
    finally:
        context.shutdown()


def cmd_print_summary(printer: Optional[str], keep_file: bool) -> int:
    print("[PrintDesk] Printing summary...")
    result = asyncio.run(_dispatch_print_summary(printer, keep_file))
    if result["success"]:
        print("[PrintDesk] ✓ Summary sent to printer")
        return 0
    print(f"[PrintDesk] ✗ {result['error']}")
    return 1


# ---------------------------------------------------------------------------
# logs
# ---------------------------------------------------------------------------


def cmd_logs(limit: int, as_json: bool) -> int:
    store = LogStore(log_dir=str(settings.log_dir), env=settings.env)
    entries = store.get_recent_logs(limit)

    if not entries:
        print(f"[PrintDesk] No log entries in {store.log_file}")
        return 0

    for entry in entries:
        if as_json:
            print(entry.model_dump_json())
        else:
            details = f" {json.dumps(entry.details)}" if entry.details is not None else ""
            print(f"{entry.timestamp or '-'} [{entry.level.value}] {entry.message}{details}")
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="PrintDesk CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = subparsers.add_parser("serve", help="Start the local API server")
    p_serve.add_argument(
        "--host",
        default=settings.host,
        help="Bind address (default: PRINTDESK_HOST or 127.0.0.1)",
    )
    p_serve.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help="Port (default: PRINTDESK_PORT or 8765)",
    )

    # locate
    p_locate = subparsers.add_parser("locate", help="Find the print tool executable")
    p_locate.add_argument(
        "dirs",
        nargs="*",
        help="Extra directories to probe before the defaults",
    )

    # print-summary
    p_print = subparsers.add_parser("print-summary", help="Generate and print the summary")
    p_print.add_argument("--printer", default=None, help="Printer name (default: system default)")
    p_print.add_argument(
        "--keep-file",
        action="store_true",
        help="Keep the generated PDF instead of deleting it after printing",
    )

    # logs
    p_logs = subparsers.add_parser("logs", help="Show recent log entries")
    p_logs.add_argument("-n", "--limit", type=int, default=20, help="Number of entries")
    p_logs.add_argument("--json", action="store_true", help="Print raw JSON lines")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    command: str = args.command

    if command == "serve":
        return cmd_serve(host=args.host, port=args.port)
    elif command == "locate":
        return cmd_locate(extra_dirs=args.dirs)
    elif command == "print-summary":
        return cmd_print_summary(printer=args.printer, keep_file=args.keep_file)
    elif command == "logs":
        return cmd_logs(limit=args.limit, as_json=args.json)
    else:
        parser.error(f"Unknown command: {command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
