from backend.engine.gamestate.timer import TimerService

__all__ = ["TimerService"]
