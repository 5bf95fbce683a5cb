"""
Command line interface for Tap Ledger.

Every invocation performs one ledger operation against the configured
database and prints the result as JSON on stdout. Rejected operations print
``{"error": {...}}`` on stderr and exit with status 1; startup failures exit
with status 2 and database errors during the operation with status 3.

Examples
--------
    tapledger initialize --caller admin
    tapledger register --caller alice
    tapledger submit --caller alice 100
    tapledger leaderboard
    tapledger player alice
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from tapledger import __version__
from tapledger.bootstrap import shutdown, startup
from tapledger.core.database.service import DatabaseInitializationError
from tapledger.core.logging.logger import LogContext, setup_logging, shutdown_logging
from tapledger.modules.leaderboard.service import LeaderboardService
from tapledger.modules.shared.exceptions import LedgerDomainException

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_STARTUP_FAILED = 2
EXIT_STORE_FAILED = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tapledger",
        description="Tap leaderboard ledger: personal bests and a global champion.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy async URL (default: DATABASE_URL from the environment)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    initialize = commands.add_parser("initialize", help="Create the leaderboard")
    initialize.add_argument("--caller", required=True, help="Administrator identity")

    register = commands.add_parser("register", help="Register the caller as a player")
    register.add_argument("--caller", required=True, help="Player identity")

    submit = commands.add_parser("submit", help="Submit a score for the caller")
    submit.add_argument("--caller", required=True, help="Submitting identity")
    submit.add_argument("score", help="Positive whole number")
    submit.add_argument(
        "--player",
        default=None,
        help="Player record to update (defaults to the caller)",
    )

    commands.add_parser("leaderboard", help="Show the global leaderboard")

    player = commands.add_parser("player", help="Show one player's record")
    player.add_argument("identity", help="Player identity")

    return parser


async def _dispatch(service: LeaderboardService, args: argparse.Namespace) -> Dict[str, Any]:
    if args.command == "initialize":
        snapshot = await service.initialize(args.caller)
        return {"initialized": True, "administrator": args.caller, **snapshot.to_dict()}

    if args.command == "register":
        player = await service.register_player(args.caller)
        return {"registered": True, **player.to_dict()}

    if args.command == "submit":
        outcome = await service.submit_score(args.caller, args.score, player=args.player)
        return outcome.to_dict()

    if args.command == "leaderboard":
        leaderboard = await service.query_leaderboard()
        return leaderboard.to_dict()

    if args.command == "player":
        player = await service.get_player_record(args.identity)
        return player.to_dict()

    raise ValueError(f"Unknown command: {args.command}")


async def _run(args: argparse.Namespace) -> Tuple[int, Dict[str, Any]]:
    try:
        service = await startup(args.database_url)
    except DatabaseInitializationError as exc:
        await shutdown()
        return EXIT_STARTUP_FAILED, {"error": {"error_type": type(exc).__name__, "message": str(exc)}}

    try:
        async with LogContext(command=args.command, component="cli"):
            result = await _dispatch(service, args)
    except LedgerDomainException as exc:
        return EXIT_REJECTED, {"error": exc.to_dict()}
    except SQLAlchemyError as exc:
        return EXIT_STORE_FAILED, {"error": {"error_type": type(exc).__name__, "message": str(exc)}}
    finally:
        await shutdown()

    return EXIT_OK, result


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging()
    try:
        code, payload = asyncio.run(_run(args))
    finally:
        shutdown_logging()

    stream = sys.stdout if code == EXIT_OK else sys.stderr
    print(json.dumps(payload, default=str), file=stream)
    return code


if __name__ == "__main__":
    sys.exit(main())
