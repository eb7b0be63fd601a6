from backend.engine.playback.controller import (
    PlaybackController,
    PlaybackSession,
    PlaybackState,
)
from backend.engine.playback.trajectory import ExplicitPath, Reconstructed, build_trajectory

__all__ = [
    "ExplicitPath",
    "PlaybackController",
    "PlaybackSession",
    "PlaybackState",
    "Reconstructed",
    "build_trajectory",
]
