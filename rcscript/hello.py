"""A small script that greets the server and reports the game time."""

from __future__ import annotations

import argparse
import asyncio
import logging

from .errors import ScriptError
from .script import DEFAULT_SERVER, Context, Script

logger = logging.getLogger(__name__)


async def _on_init(ctx: Context) -> None:
    logger.info("on_init is called!")
    await ctx.info("on_init is called!")


async def _on_execute(ctx: Context, args: list) -> int:
    logger.info("on_execute is called!")
    await ctx.info("on_execute is called!")
    gametime = await ctx.query_gametime()
    logger.info("gametime = %d", gametime)
    await ctx.info(f"gametime = {gametime}")
    return 1


def build_script(server: str = DEFAULT_SERVER) -> Script:
    """Build the greeting script for the given server."""
    return Script("hello", server=server).on_init(_on_init).on_execute(_on_execute)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="rcscript-hello",
        description="Greet the server and report the game time on every run.",
    )
    parser.add_argument("--server", default=DEFAULT_SERVER, help="websocket address of the server")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(build_script(args.server).run())
    except KeyboardInterrupt:
        logger.info("Shutdown")
    except ScriptError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())