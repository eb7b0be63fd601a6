"""HTTP client for the remote puzzle solver."""

from __future__ import annotations

import logging
from typing import Any

import requests

from backend.engine.gamesolver.errors import NetworkError
from backend.models.board import Board
from backend.models.solution import Algorithm
from backend.settings import Settings

logger = logging.getLogger(__name__)

_ACCEPT = "application/json, text/plain;q=0.9,*/*;q=0.8"


def _parse_body(response: requests.Response) -> Any:
    """Decode JSON when the server says it is JSON, otherwise return text."""
    if response.status_code == 204 or not response.content:
        return None
    content_type = response.headers.get("Content-Type", "").lower()
    if "application/json" in content_type:
        try:
            return response.json()
        except ValueError:
            pass
    return response.text


def _error_message(response: requests.Response, data: Any) -> str:
    if isinstance(data, str) and data.strip():
        return data.strip()
    if isinstance(data, dict) and isinstance(data.get("message"), str) and data["message"]:
        return data["message"]
    return response.reason or f"HTTP {response.status_code}"


class SolverClient:
    """Blocking request/response wrapper around the solver endpoints.

    Every failure surfaces as :class:`NetworkError`; response bodies are
    returned raw and left to :mod:`backend.engine.gamesolver.normalize`.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.settings.api_base}/{path.lstrip('/')}"
        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method,
                url,
                headers={"Accept": _ACCEPT},
                timeout=self.settings.timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.warning("%s %s timed out", method, url)
            raise NetworkError("Request timed out.") from exc
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise NetworkError(str(exc) or exc.__class__.__name__) from exc

        data = _parse_body(response)
        if not response.ok:
            message = _error_message(response, data)
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            raise NetworkError(message, status=response.status_code)
        return data

    # -- endpoints ------------------------------------------------------------

    def shuffle(self, steps: int) -> Any:
        return self._request("GET", "/shuffle", params={"steps": steps})

    def solve(self, board: Board, algorithm: Algorithm) -> Any:
        return self._request(
            "POST",
            "/solve",
            json={"startState": board.to_list(), "selectedAlgorithm": str(algorithm)},
        )

    def validate(self, board: Board) -> Any:
        return self._request("POST", "/validate", json={"state": board.to_list()})

    def close(self) -> None:
        self.session.close()
