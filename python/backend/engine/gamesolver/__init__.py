from backend.engine.gamesolver.cache import FetchOutcome, SolutionCache
from backend.engine.gamesolver.client import SolverClient
from backend.engine.gamesolver.errors import NetworkError, SolverError
from backend.engine.gamesolver.heuristics import HeuristicEvaluator, MoveQuality
from backend.engine.gamesolver.hint import HintService

__all__ = [
    "FetchOutcome",
    "HeuristicEvaluator",
    "HintService",
    "MoveQuality",
    "NetworkError",
    "SolutionCache",
    "SolverClient",
    "SolverError",
]
