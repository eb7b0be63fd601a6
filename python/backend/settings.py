"""Runtime configuration, read from the environment (and an optional ``.env``)."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from backend.models.solution import Algorithm

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "http://localhost:8080/api/puzzle"


@dataclass(frozen=True)
class Settings:
    api_base: str = DEFAULT_API_BASE
    timeout: float = 10.0
    shuffle_steps: int = 80
    algorithm: Algorithm = Algorithm.ASTAR
    tick_interval: float = 0.45

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_base", self.api_base.rstrip("/"))

    @classmethod
    def from_env(
        cls,
        env_file: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Settings:
        """Build settings from ``PUZZLE_*`` variables.

        A ``.env`` file is loaded first (without overriding variables that
        are already set).  Unusable values fall back to the defaults.
        """
        if environ is None:
            load_dotenv(dotenv_path=env_file, override=False)
            environ = os.environ

        defaults = cls()
        api_base = environ.get("PUZZLE_API_BASE", "").strip() or defaults.api_base
        timeout = _read_number(environ, "PUZZLE_API_TIMEOUT", defaults.timeout)
        steps = int(_read_number(environ, "PUZZLE_SHUFFLE_STEPS", defaults.shuffle_steps))

        raw_algorithm = environ.get("PUZZLE_ALGORITHM")
        algorithm = Algorithm.parse(raw_algorithm, defaults.algorithm)
        if raw_algorithm and Algorithm.parse(raw_algorithm) is None:
            logger.warning(
                "Unknown PUZZLE_ALGORITHM %r; using %s", raw_algorithm, algorithm
            )

        return cls(
            api_base=api_base,
            timeout=timeout,
            shuffle_steps=steps,
            algorithm=algorithm,
        )


def _read_number(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r; using %s", name, raw, default)
        return default
    if not math.isfinite(value) or value <= 0:
        logger.warning("Ignoring out-of-range %s=%r; using %s", name, raw, default)
        return default
    return value
