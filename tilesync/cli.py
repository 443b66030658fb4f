"""
Tilesync CLI - Command-line interface.

Usage:
    tilesync show [--seed N]                 Print the starting board
    tilesync play [--seed N]                 Play in the terminal
    tilesync serve [--host H] [--port P]     Run the HTTP API
"""

from __future__ import annotations
from typing import Callable
import argparse
import asyncio
import functools
import sys

from .config import Settings
from .engine_core import construct_standard
from .errors import InvalidPlacement
from .infra.logging import setup_logging
from .session import SyncController, CommitStatus
from .view import TextRenderer


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Tilesync - tile-placement board game client",
        prog="tilesync",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    show_parser = subparsers.add_parser("show", help="Print the starting board")
    show_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")

    play_parser = subparsers.add_parser("play", help="Play in the terminal")
    play_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = Settings.from_env()
    setup_logging(settings)

    if args.command == "show":
        sys.exit(cmd_show(args, settings))
    elif args.command == "play":
        sys.exit(cmd_play(args, settings))
    elif args.command == "serve":
        cmd_serve(args, settings)


def _controller(seed: int | None, settings: Settings) -> SyncController:
    seed = seed if seed is not None else settings.seed
    return SyncController(
        functools.partial(construct_standard, seed),
        init_timeout=settings.init_timeout,
        name="cli",
    )


def cmd_show(args, settings: Settings) -> int:
    """Print the starting board."""
    controller = _controller(args.seed, settings)
    if not asyncio.run(controller.initialize()):
        print(f"Error: {controller.init_error}")
        return 1

    print(TextRenderer().render(controller.view_model()))
    return 0


def cmd_play(args, settings: Settings) -> int:
    """Play in the terminal."""
    controller = _controller(args.seed, settings)
    return asyncio.run(play(controller))


async def play(
    controller: SyncController,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> int:
    """
    Interactive loop. Each line is `<cell index> [rotation]`; `q` quits.

    Returns a process exit code.
    """
    renderer = TextRenderer()
    if not await controller.initialize():
        write(f"Error: {controller.init_error}")
        return 1

    while True:
        view = controller.view_model()
        write(renderer.render(view))
        if view.finished:
            write("Game over: every tile has been placed.")
            return 0

        try:
            line = read("place> ").strip()
        except EOFError:
            return 0
        if line.lower() in {"q", "quit", "exit"}:
            return 0

        parts = line.split()
        try:
            cell_index = int(parts[0])
            rotation = int(parts[1]) if len(parts) > 1 else 0
            result = await controller.place(cell_index, rotation)
        except (IndexError, ValueError, InvalidPlacement) as e:
            write(f"Expected '<cell index> [rotation 0-3]': {e}")
            continue

        if result.status is CommitStatus.ILLEGAL:
            write(f"Refused: {result.error}")


def cmd_serve(args, settings: Settings):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from .api import APIService, create_app

    app = create_app(APIService(settings=settings))
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)


if __name__ == "__main__":
    main()
