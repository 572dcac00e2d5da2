"""solstamp.cli

Command line interface entry point for solana-timestamp.

Design constraints:
- argparse-based.
- Lazy imports: do not import httpx or pydantic at parse time.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

EPILOG = "Endpoints are tried in order; the first one that answers wins."


@dataclass(frozen=True)
class CliContext:
    config_dir: Path


def _config_dir_from_env() -> Path:
    from solstamp.core.config import default_config_dir

    return default_config_dir()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solana-timestamp",
        description="Get the first deployment timestamp of a Solana program.",
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_get = sub.add_parser("get", help="Get the first deployment timestamp of a Solana program")
    p_get.add_argument("program_id", help="Solana program ID")
    p_get.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    p_get.add_argument(
        "-e",
        "--endpoints",
        nargs="+",
        default=None,
        metavar="URL",
        help="Custom RPC endpoint URLs to try in order",
    )
    p_get.add_argument("--iso", action="store_true", help="Print ISO-8601 UTC instead of Unix seconds")
    p_get.add_argument("--strategy", choices=["combined", "pagination"], default=None)
    p_get.add_argument("--max-retries", type=int, default=None)
    p_get.add_argument("--retry-delay-ms", type=int, default=None)

    p_rpc = sub.add_parser("rpc", help="Manage RPC endpoint URLs")
    rpc_sub = p_rpc.add_subparsers(dest="rpc_command")

    p_add = rpc_sub.add_parser("add", help="Add an RPC endpoint URL to the configuration")
    p_add.add_argument("url", help="RPC endpoint URL")
    p_add.add_argument("-d", "--default", action="store_true", help="Set as default RPC URL")
    p_add.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    p_remove = rpc_sub.add_parser("remove", help="Remove an RPC endpoint URL from the configuration")
    p_remove.add_argument("url", help="RPC endpoint URL")
    p_remove.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    p_list = rpc_sub.add_parser("list", help="List all configured RPC endpoint URLs")
    p_list.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    p_default = rpc_sub.add_parser("set-default", help="Set the default RPC endpoint URL")
    p_default.add_argument("url", help="RPC endpoint URL")
    p_default.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    return parser


def _print_version() -> None:
    from solstamp import __version__

    print(f"solana-timestamp v{__version__}")


def _setup(ctx: CliContext, args: argparse.Namespace):
    from solstamp.core.config import Config
    from solstamp.core.exceptions import ConfigError
    from solstamp.core.logconfig import setup_logging

    try:
        config = Config.load(ctx.config_dir)
    except ConfigError as e:
        print(f"warning: {e}; using defaults", file=sys.stderr)
        config = Config()
    logger = setup_logging(config.logging, verbose=bool(getattr(args, "verbose", False)))
    return config, logger


def _cmd_get(ctx: CliContext, args: argparse.Namespace) -> int:
    from dataclasses import replace
    from functools import partial

    from solstamp.core.endpoints import EndpointStore, resolve_endpoints
    from solstamp.core.exceptions import InvalidIdentifierError, SolstampError
    from solstamp.core.identifier import validate_program_id
    from solstamp.core.time import format_unix
    from solstamp.discovery.orchestrator import discover_first_timestamp
    from solstamp.rpc.client import SolanaRpcClient
    from solstamp.rpc.health import filter_reachable

    config, logger = _setup(ctx, args)

    # Bad ids never reach the network, not even the endpoint probe.
    try:
        validate_program_id(args.program_id)
    except InvalidIdentifierError as e:
        logger.error("program_id_invalid", extra={"program_id": args.program_id})
        print(f"error: {e}", file=sys.stderr)
        return 1

    try:
        options = config.discovery_options()
        if args.strategy:
            options = replace(options, strategy=args.strategy)
        if args.max_retries is not None:
            options = replace(options, max_retries=args.max_retries)
        if args.retry_delay_ms is not None:
            options = replace(options, retry_delay_ms=args.retry_delay_ms)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    retry_cfg = config.retry.model_copy(update={"retry_delay_ms": options.retry_delay_ms})

    factory = partial(
        SolanaRpcClient,
        timeout_s=config.rpc.timeout_s,
        rate_limit_rps=config.rpc.rate_limit_rps,
    )

    async def _run() -> int:
        endpoints = await resolve_endpoints(
            args.endpoints,
            EndpointStore(ctx.config_dir),
            probe=partial(filter_reachable, timeout_s=config.rpc.timeout_s),
        )
        return await discover_first_timestamp(
            args.program_id,
            endpoints,
            options,
            transport_factory=factory,
            delay=retry_cfg.delay_strategy(),
            logger=logger.getChild("discovery"),
        )

    try:
        ts = asyncio.run(_run())
    except SolstampError as e:
        logger.error("get_failed", extra={"error": str(e)})
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(format_unix(ts) if args.iso else ts)
    return 0


def _cmd_rpc(ctx: CliContext, args: argparse.Namespace) -> int:
    from solstamp.core.endpoints import EndpointStore

    sub = str(args.rpc_command or "")
    if sub not in _RPC_DISPATCH:
        print("usage: solana-timestamp rpc {add,remove,list,set-default} ...", file=sys.stderr)
        return 2

    config, _ = _setup(ctx, args)
    store = EndpointStore(ctx.config_dir)
    return int(_RPC_DISPATCH[sub](store, args, config.rpc.timeout_s))


def _rpc_add(store, args: argparse.Namespace, timeout_s: float) -> int:
    from solstamp.core.exceptions import TransientRpcError
    from solstamp.rpc.health import check_endpoint

    try:
        asyncio.run(check_endpoint(args.url, timeout_s=timeout_s))
    except TransientRpcError as e:
        print(f"Failed to validate RPC endpoint: {args.url} ({e})", file=sys.stderr)
        print("Please provide a valid Solana RPC URL", file=sys.stderr)
        return 1

    if not store.add(args.url, make_default=bool(args.default)):
        print("Failed to add RPC URL to configuration", file=sys.stderr)
        return 1

    suffix = " (default)" if store.default() == args.url else ""
    print(f"Added RPC URL: {args.url}{suffix}")
    return 0


def _rpc_remove(store, args: argparse.Namespace, timeout_s: float) -> int:
    before = store.default()
    if not store.remove(args.url):
        print("Failed to remove RPC URL", file=sys.stderr)
        return 1

    print(f"Removed RPC URL: {args.url}")
    after = store.default()
    if after != before:
        print(f"Default URL is now: {after}")
    return 0


def _rpc_list(store, args: argparse.Namespace, timeout_s: float) -> int:
    urls = store.urls()
    default_url = store.default()
    if not urls:
        print("No RPC URLs configured")
        return 0

    print("Configured RPC URLs:")
    for url in urls:
        print(f"{'* ' if url == default_url else '  '}{url}")
    print("\n* = default URL")
    return 0


def _rpc_set_default(store, args: argparse.Namespace, timeout_s: float) -> int:
    if not store.set_default(args.url):
        print("Failed to set default RPC URL. Make sure the URL is in your configuration.", file=sys.stderr)
        return 1
    print(f"Set default RPC URL: {args.url}")
    return 0


_RPC_DISPATCH = {
    "add": _rpc_add,
    "remove": _rpc_remove,
    "list": _rpc_list,
    "set-default": _rpc_set_default,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(config_dir=_config_dir_from_env())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "get": _cmd_get,
        "rpc": _cmd_rpc,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())
