from .coordinator import SearchCoordinator, SearchState

__all__ = ["SearchCoordinator", "SearchState"]
