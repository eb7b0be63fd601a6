"""Errors raised while talking to the remote solver."""

from __future__ import annotations


class SolverError(Exception):
    """Base class for solver failures that should be shown to the user."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class NetworkError(SolverError):
    """The request failed in transport or came back with a non-2xx status."""
