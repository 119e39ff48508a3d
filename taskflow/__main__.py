"""
taskflow.__main__ -- CLI entry point.

Usage:
    taskflow init [--memory-path DIR]
    taskflow serve [--memory-path DIR] [--config PATH] [--transport stdio|sse|streamable-http]
                   [--host HOST] [--port N] [--log-level LEVEL]
    taskflow stats [--memory-path DIR]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from taskflow.core.config import DEFAULT_MEMORY_BANK_PATH, VALID_TRANSPORTS


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="taskflow",
        description="TaskFlow -- memory bank MCP server with plan/act task workflow",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # -- init --------------------------------------------------------------
    init_p = sub.add_parser("init", help="Create a memory bank with default files")
    init_p.add_argument(
        "--memory-path",
        default=DEFAULT_MEMORY_BANK_PATH,
        help=f"Memory bank directory (default: {DEFAULT_MEMORY_BANK_PATH})",
    )

    # -- serve -------------------------------------------------------------
    serve_p = sub.add_parser("serve", help="Start the MCP server")
    serve_p.add_argument("--memory-path", default=None, help="Memory bank directory")
    serve_p.add_argument("--config", default=None, help="Path to taskflow.yaml config")
    serve_p.add_argument(
        "--transport",
        default=None,
        choices=list(VALID_TRANSPORTS),
        help="MCP transport (default: stdio)",
    )
    serve_p.add_argument("--host", default=None, help="Bind address for HTTP transports")
    serve_p.add_argument("--port", type=int, default=None, help="Port for HTTP transports")
    serve_p.add_argument(
        "--log-level",
        default=None,
        help="Logging level (debug, info, warn, error)",
    )

    # -- stats -------------------------------------------------------------
    stats_p = sub.add_parser("stats", help="Show memory bank statistics")
    stats_p.add_argument(
        "--memory-path", default=DEFAULT_MEMORY_BANK_PATH, help="Memory bank directory"
    )

    args = parser.parse_args(argv)

    # -- Logging -----------------------------------------------------------
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        return

    # -- Dispatch ----------------------------------------------------------
    if args.command == "init":
        _cmd_init(args)
    elif args.command == "serve":
        _cmd_serve(args)
    elif args.command == "stats":
        _cmd_stats(args)
    else:
        parser.print_help()


# ---------------------------------------------------------------------------
# Command implementations
# ---------------------------------------------------------------------------


def _cmd_init(args: argparse.Namespace) -> None:
    """Create the memory bank, its default documents, and a config template."""
    from taskflow.system import TaskflowSystem

    memory_dir = Path(args.memory_path).resolve()
    system = TaskflowSystem(memory_dir=memory_dir)
    asyncio.run(system.init())

    config_path = memory_dir.parent / "taskflow.yaml"
    if not config_path.exists():
        config_path.write_text(
            "# TaskFlow configuration\n"
            "taskflow:\n"
            f"  memory_bank_dir: {memory_dir}\n"
            "  cache_max_entries: 100\n"
            "  cache_ttl_seconds: 900          # 15 minutes\n"
            "  operation_retention_seconds: 3600\n"
            "  default_mode: plan             # plan | act\n"
            "  log_level: INFO\n"
            "  transport: stdio               # stdio | sse | streamable-http\n",
            encoding="utf-8",
        )

    print(f"Initialized Memory Bank at: {memory_dir}")
    for name in sorted(p.name for p in memory_dir.glob("*.md")):
        print(f"  {name}")
    print(f"Config: {config_path}")
    print()
    print("Next steps:")
    print("  1. Describe the project in projectbrief.md")
    print("  2. Run: taskflow serve --memory-path", str(memory_dir))


def _cmd_serve(args: argparse.Namespace) -> None:
    """Start the MCP server."""
    from taskflow.server import run_server

    log_level = args.log_level or ("DEBUG" if args.verbose else None)
    run_server(
        memory_dir=args.memory_path,
        config_path=args.config,
        transport=args.transport,
        host=args.host,
        port=args.port,
        log_level=log_level,
    )


def _cmd_stats(args: argparse.Namespace) -> None:
    """Print memory bank statistics."""
    from taskflow.system import TaskflowSystem

    system = TaskflowSystem(memory_dir=args.memory_path)
    stats = asyncio.run(system.store.stats())
    print(json.dumps(stats.to_dict(), indent=2))


if __name__ == "__main__":
    main()
