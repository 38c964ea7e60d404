"""Entry point: python -m indigo [chat|serve|init|review|evaluate]

- chat:     Interactive REPL against one garden
- serve:    JSON API (+ static front-end) until SIGINT/SIGTERM
- init:     Create a new garden record
- review:   Run a periodic review over a garden's log
- evaluate: Score a provider's image analysis against ground truth
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from indigo.config import IndigoConfig, load_config
from indigo.errors import IndigoError


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_indigo(config: IndigoConfig):
    from indigo.core import Indigo

    return Indigo(config)


def cmd_chat(args: argparse.Namespace, config: IndigoConfig) -> None:
    from indigo.connectors.cli import CLIConnector

    cli = CLIConnector(_build_indigo(config), args.garden, args.provider)
    try:
        asyncio.run(cli.start())
    except KeyboardInterrupt:
        pass


def cmd_serve(args: argparse.Namespace, config: IndigoConfig) -> None:
    from indigo.connectors.http import HTTPConnector

    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.static_dir:
        config.server.static_dir = Path(args.static_dir)

    server = HTTPConnector(_build_indigo(config), config.server)
    asyncio.run(server.run())


def cmd_init(args: argparse.Namespace, config: IndigoConfig) -> None:
    memory = _build_indigo(config).create_garden(
        args.garden,
        principles=args.principle,
        location=args.location,
        zone=args.zone,
        style=args.style,
    )
    print(f"Created garden '{memory.name}' in {config.gardens_dir}")


def cmd_review(args: argparse.Namespace, config: IndigoConfig) -> None:
    indigo = _build_indigo(config)
    record = asyncio.run(indigo.review(args.garden, args.period, args.provider))
    if record is None:
        print(f"Garden '{args.garden}' has no log entries to review.")
        return
    print(f"[{record.period}] {record.summary}")
    print()
    for lesson in record.lessons_learned:
        print(lesson)


def cmd_evaluate(args: argparse.Namespace, config: IndigoConfig) -> None:
    from indigo.clients import create_client
    from indigo.evaluate import evaluate_images, format_report

    client = create_client(args.provider, config)
    report = asyncio.run(evaluate_images(client, Path(args.images_dir)))
    print(format_report(report))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="indigo", description="Indigo garden memory assistant")
    parser.add_argument("--config", "-c", type=str, default=None, help="Path to indigo.toml")
    subparsers = parser.add_subparsers(dest="command")

    chat_parser = subparsers.add_parser("chat", help="Interactive REPL for one garden")
    chat_parser.add_argument("garden")
    chat_parser.add_argument("provider", nargs="?", default=None)

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", "-p", type=int, default=None)
    serve_parser.add_argument("--static-dir", type=str, default=None)

    init_parser = subparsers.add_parser("init", help="Create a new garden")
    init_parser.add_argument("garden")
    init_parser.add_argument("--location", default="")
    init_parser.add_argument("--zone", default="")
    init_parser.add_argument("--style", default="")
    init_parser.add_argument(
        "--principle", action="append", default=[], help="Guiding principle (repeatable)"
    )

    review_parser = subparsers.add_parser("review", help="Run a periodic review")
    review_parser.add_argument("garden")
    review_parser.add_argument("period")
    review_parser.add_argument("provider", nargs="?", default=None)

    eval_parser = subparsers.add_parser("evaluate", help="Evaluate image analysis accuracy")
    eval_parser.add_argument("provider", nargs="?", default="openai")
    eval_parser.add_argument("images_dir", nargs="?", default="test-images")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = load_config(Path(args.config) if args.config else None)
    _setup_logging(config.log_level)

    commands = {
        "chat": cmd_chat,
        "serve": cmd_serve,
        "init": cmd_init,
        "review": cmd_review,
        "evaluate": cmd_evaluate,
    }
    try:
        commands[args.command](args, config)
    except (IndigoError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
