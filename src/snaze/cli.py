"""Command-line launcher and driver loop for snaze."""

from __future__ import annotations

import argparse
import contextlib
import logging
import sys
import time
from collections.abc import Callable

from snaze.config import Settings
from snaze.levels import list_levels
from snaze.pathfinder import AgentKind
from snaze.session import InputSource, Presenter, Session

logger = logging.getLogger(__name__)

DEFAULT_LEVELS_DIR = "levels"
DEFAULT_CONFIG = "conf/snaze.ini"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snaze",
        description="Snake in a maze, played by you or by a bot.",
    )
    parser.add_argument(
        "--levels", type=str, default=DEFAULT_LEVELS_DIR,
        help="Directory holding the level files.",
    )
    parser.add_argument(
        "--config", type=str, default=DEFAULT_CONFIG,
        help="Path to an INI or JSON settings file.",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Seed for level draws, food placement and bot moves.",
    )
    parser.add_argument(
        "--agent", type=str, default=None,
        choices=[k.value for k in AgentKind],
        help="Bot used in bot mode (skips the bot menu).",
    )
    parser.add_argument(
        "--log-file", type=str, default=None,
        help="Write logs to this file instead of stderr.",
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    # Without a log file the terminal belongs to the game, so stay quiet.
    level = args.log_level or ("INFO" if args.log_file else "WARNING")
    logging.basicConfig(
        level=getattr(logging, level),
        filename=args.log_file,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def run(
    session: Session,
    presenter: Presenter,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Drive *session* until the player quits."""
    presenter.present(session.produce_view())
    while not session.finished:
        session.collect_input()
        session.advance()
        presenter.present(session.produce_view())
        delay = session.frame_delay
        if delay > 0:
            sleep(delay)


def main(
    argv: list[str] | None = None,
    inputs: InputSource | None = None,
    presenter: Presenter | None = None,
) -> int:
    """Entry point for the ``snaze`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    try:
        settings = Settings.load(args.config)
        levels = list_levels(args.levels)
    except (OSError, ValueError) as exc:
        logger.error("Cannot start snaze: %s", exc)
        print(f"snaze: {exc}", file=sys.stderr)  # noqa: T201
        return 2

    if args.agent is not None:
        settings = settings.with_agent(AgentKind(args.agent))

    with contextlib.ExitStack() as stack:
        if inputs is None or presenter is None:
            from snaze.terminal import RichPresenter, TerminalInput

            if inputs is None:
                # Restores the terminal attributes on exit.
                inputs = stack.enter_context(TerminalInput())
            if presenter is None:
                presenter = RichPresenter()
        return _play(Session(settings, levels, inputs, seed=args.seed), presenter)


def _play(session: Session, presenter: Presenter) -> int:
    try:
        run(session, presenter)
    except KeyboardInterrupt:
        logger.info("Interrupted by the player")
        return 130
    except EOFError:
        logger.info("Input closed, leaving the game")
        return 0
    except Exception:
        logger.exception("Snaze stopped on a fatal error")
        raise
    return 0


if __name__ == "__main__":
    sys.exit(main())
