from stochcum.solvers.config import SearchConfig
from stochcum.solvers.dfs import SearchResult, solve

__all__ = ["SearchConfig", "SearchResult", "solve"]
