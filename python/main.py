#!/usr/bin/env python3
"""8-Puzzle client.

Usage::

    python main.py                          # play against the default solver
    python main.py -a bfs                   # start with breadth-first search
    python main.py --api http://host/api/puzzle -v
"""

import dataclasses
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

ROOT = Path(__file__).resolve().parent  # python/

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.models.solution import Algorithm  # noqa: E402
from backend.settings import Settings  # noqa: E402


def _configure_logging(verbose: bool, log_file: Path) -> None:
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# -- CLI entry point ----------------------------------------------------------

app = typer.Typer(add_completion=False)


@app.command()
def main(
    api: Optional[str] = typer.Option(
        None, "--api",
        help="Solver base URL (defaults to PUZZLE_API_BASE).",
    ),
    algorithm: Optional[Algorithm] = typer.Option(
        None, "-a", "--algorithm",
        help="Search algorithm to start with.",
    ),
    steps: Optional[int] = typer.Option(
        None, "--steps",
        min=1, max=500,
        help="Random moves used when shuffling.",
    ),
    env_file: Optional[Path] = typer.Option(
        None, "--env-file",
        help="Read settings from this .env file.",
    ),
    log_file: Path = typer.Option(
        Path("puzzle-client.log"), "--log-file",
        help="Where to write logs (keeps the terminal UI clean).",
    ),
    verbose: bool = typer.Option(
        False, "-v", "--verbose",
        help="Log at DEBUG level.",
    ),
) -> None:
    """8-Puzzle client with remote solving and step-by-step playback."""
    _configure_logging(verbose, log_file)

    settings = Settings.from_env(env_file)
    overrides: dict = {}
    if api:
        overrides["api_base"] = api
    if algorithm is not None:
        overrides["algorithm"] = algorithm
    if steps is not None:
        overrides["shuffle_steps"] = steps
    if overrides:
        settings = dataclasses.replace(settings, **overrides)

    from frontend.cli.rich.app import run

    run(settings)


if __name__ == "__main__":
    app()
