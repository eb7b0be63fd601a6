from backend.engine.gameplay.game import BoardMode, GamePlay
from backend.engine.gameplay.moves import MoveEngine, Validation

__all__ = ["BoardMode", "GamePlay", "MoveEngine", "Validation"]
