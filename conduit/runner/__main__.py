"""
conduit.runner.__main__ - CLI entry point for the adapter process

Usage:
    python -m conduit.runner tools
    python -m conduit.runner invoke get_task --args '{"task_id": "T-1"}'
    python -m conduit.runner serve < requests.jsonl
"""

import argparse
import asyncio
import json
import logging
import sys

from conduit.errors import ConfigurationError
from conduit.runner.main import build_registry, run_invoke, run_server
from conduit.settings import resolve

logger = logging.getLogger("conduit.runner")

# Exit status when the process must not start serving
EXIT_CONFIGURATION_ERROR = 2


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="conduit-runner",
        description="Expose a third-party HTTP API as typed tool operations",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: CONDUIT_LOG_LEVEL, else INFO)",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Local override file read in addition to the environment (default: .env)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("tools", help="Print the tool schemas as JSON")

    invoke = subparsers.add_parser("invoke", help="Run one tool invocation")
    invoke.add_argument("tool", help="Tool name (e.g. list_tasks)")
    invoke.add_argument("--args", default="{}", help="Tool arguments as a JSON object")

    subparsers.add_parser("serve", help="Answer JSON-lines requests from stdin")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, resolve configuration and run the requested command."""
    args = _parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level or "INFO"),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    if args.command == "tools":
        print(json.dumps(build_registry().get_all_tool_schemas(), indent=2))
        return 0

    try:
        settings = resolve(env_file=args.env_file)
    except ConfigurationError as e:
        logger.error(f"Refusing to start: {e}")
        return EXIT_CONFIGURATION_ERROR

    if args.log_level is None:
        logging.getLogger().setLevel(settings.log_level)

    try:
        if args.command == "invoke":
            try:
                arguments = json.loads(args.args)
            except json.JSONDecodeError as e:
                logger.error(f"--args is not valid JSON: {e}")
                return 1
            return asyncio.run(run_invoke(settings, args.tool, arguments))
        return asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
