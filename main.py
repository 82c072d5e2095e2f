#!/usr/bin/env python3
"""labyrinth: Daedalus builds mazes, Icarus solves them.

Usage:
    python main.py daedalus --width 20 --height 15 --pretty
    python main.py icarus --times 50
    python main.py local --times 50           # both roles in one process
"""
import argparse
import logging
import sys

import requests
import uvicorn
from websockets.exceptions import WebSocketException

from app import create_app
from client import HttpDaedalus, LocalDaedalus, WebSocketDaedalus, run_icarus
from config import Settings
from game import SessionManager

log = logging.getLogger("labyrinth")


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    # uvicorn access lines would drown the maze dumps
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Daedalus & Icarus labyrinth runner.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every move.")

    common = argparse.ArgumentParser(add_help=False)
    g_maze = common.add_argument_group("Maze")
    g_maze.add_argument("--width", type=int, default=None, help="Maze width in rooms. Default: 15")
    g_maze.add_argument("--height", type=int, default=None, help="Maze height in rooms. Default: 10")
    g_maze.add_argument("--times", type=int, default=None, help="Number of labyrinths to solve. Default: 10")
    g_maze.add_argument("--pretty", action="store_true", default=None, help="Pretty debug dump of each maze.")
    g_net = common.add_argument_group("Network")
    g_net.add_argument("--host", default=None, help="Daedalus host. Default: 127.0.0.1")
    g_net.add_argument("--port", type=int, default=None, help="Daedalus port. Default: 8080")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("daedalus", aliases=["server", "deadalus"], parents=[common], help="Serve labyrinths.")
    p_icarus = sub.add_parser("icarus", aliases=["client"], parents=[common], help="Solve labyrinths.")
    p_icarus.add_argument(
        "--transport", choices=["http", "ws"], default="http",
        help="How to reach Daedalus. Default: http",
    )
    sub.add_parser("local", parents=[common], help="Serve and solve in-process, no network.")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings.from_env().override(
        width=args.width,
        height=args.height,
        times=args.times,
        pretty=args.pretty,
        host=args.host,
        port=args.port,
    ).validate()


def run_daedalus(settings: Settings) -> int:
    manager = SessionManager(settings)
    app = create_app(manager)
    server = uvicorn.Server(uvicorn.Config(app, host=settings.host, port=settings.port, log_level="info"))

    def stop() -> None:
        server.should_exit = True

    app.state.on_done = stop
    log.info("Daedalus listening on %s", settings.base_url)
    server.run()
    return 0


def run_client(settings: Settings, transport: str) -> int:
    try:
        if transport == "ws":
            with WebSocketDaedalus(settings.ws_url) as link:
                results = run_icarus(link, settings.times)
        else:
            link = HttpDaedalus(settings.base_url)
            try:
                results = run_icarus(link, settings.times)
            finally:
                link.close()
    except (requests.exceptions.RequestException, WebSocketException, ConnectionError, OSError) as e:
        log.error("Could not talk to Daedalus at %s: %s", settings.base_url, e)
        return 1
    return 0 if all(results) else 2


def run_local(settings: Settings) -> int:
    manager = SessionManager(settings)
    results = run_icarus(LocalDaedalus(manager), settings.times)
    return 0 if all(results) else 2


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    if args.command in ("daedalus", "deadalus", "server"):
        return run_daedalus(settings)
    if args.command in ("icarus", "client"):
        return run_client(settings, args.transport)
    return run_local(settings)


if __name__ == "__main__":
    sys.exit(main())
