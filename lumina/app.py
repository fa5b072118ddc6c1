"""Lumina — main application entry point."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from dataclasses import replace
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lumina.engine.session import ChatSession

LOG_DIR = Path.home() / ".lumina" / "logs"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [pid=%(process)d] %(message)s"


def _configure_logging(level_name: str, to_stderr: bool) -> Path | None:
    """Rotating file log under ~/.lumina/logs, plus stderr when asked."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    root.handlers.clear()
    formatter = logging.Formatter(LOG_FORMAT)

    log_file: Path | None = LOG_DIR / "lumina.log"
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file, maxBytes=2_000_000, backupCount=5, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
    except OSError:
        log_file = None

    if to_stderr:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)
    return log_file


async def _run_print(session: ChatSession, prompt: str, is_dark: bool) -> int:
    """Send one prompt, print the reply with Rich, return the exit code."""
    from rich.console import Console

    from lumina.shared.formatters.render import render_turn, render_turn_rich

    try:
        accepted = await session.send(prompt)
    finally:
        await session.aclose()
    if not accepted:
        print("Nothing to send: the prompt is empty.", file=sys.stderr)
        return 2

    reply = session.conversation.last
    Console().print(render_turn_rich(render_turn(reply, is_dark), is_dark))
    return 1 if session.last_error is not None else 0


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(
        prog="lumina",
        description="Lumina — terminal chat client",
    )
    parser.add_argument(
        "--config", metavar="PATH",
        help="YAML config file (default: .lumina/lumina.yaml or lumina.yaml)",
    )
    parser.add_argument(
        "--model", metavar="ID",
        help="Model identifier (overrides config and LUMINA_MODEL)",
    )
    theme = parser.add_mutually_exclusive_group()
    theme.add_argument(
        "--light", dest="dark_mode", action="store_false", default=None,
        help="Start with the light theme",
    )
    theme.add_argument(
        "--dark", dest="dark_mode", action="store_true", default=None,
        help="Start with the dark theme",
    )
    parser.add_argument(
        "--demo", action="store_true",
        help="Use canned offline replies instead of the remote model",
    )
    parser.add_argument(
        "--print", dest="prompt", metavar="PROMPT",
        help="Send one prompt, print the reply and exit",
    )
    parser.add_argument(
        "--log-level", default=os.getenv("LUMINA_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO, or LUMINA_LOG_LEVEL)",
    )
    args = parser.parse_args()

    log_file = _configure_logging(args.log_level, to_stderr=args.prompt is not None)
    logger = logging.getLogger(__name__)

    from lumina.engine.errors import LuminaError
    from lumina.engine.providers import build_client
    from lumina.engine.session import ChatSession
    from lumina.engine.yaml_config import load_config
    from lumina.shared.services.preferences import UserPreferences

    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Config file not found: {args.config}", file=sys.stderr)
        sys.exit(2)
    except LuminaError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(2)

    engine = config.engine
    if args.model:
        engine = replace(engine, model=args.model)
    if args.demo:
        engine = replace(engine, provider="demo")

    try:
        client = build_client(engine)
    except LuminaError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(2)

    session = ChatSession(client, engine)
    prefs = UserPreferences.load()
    dark_mode = args.dark_mode
    if dark_mode is None:
        dark_mode = config.ui.dark_mode
    logger.info(
        "Starting Lumina provider=%s model=%s config=%s log=%s",
        engine.provider, engine.model, config.source or "<none>", log_file,
    )

    if args.prompt is not None:
        is_dark = prefs.dark_mode if dark_mode is None else dark_mode
        sys.exit(asyncio.run(_run_print(session, args.prompt, is_dark)))

    # TUI mode
    from lumina.tui.app import LuminaApp

    app = LuminaApp(session, dark_mode=dark_mode, preferences=prefs)
    app.run()


if __name__ == "__main__":
    main()
