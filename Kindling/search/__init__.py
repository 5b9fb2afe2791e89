from .engine import SORT_MODES, SearchEngine, SearchResult

__all__ = ["SORT_MODES", "SearchEngine", "SearchResult"]
