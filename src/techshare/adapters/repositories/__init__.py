from .interface import GlobalTechnologyRepository, TechnologyRepository
from .in_memory_repository import GlobalTechnologyInMemoryRepository, TechnologyInMemoryRepository
from .json_repository import GlobalTechnologyJsonRepository, TechnologyJsonRepository, load_market_prices

__all__ = [
    "GlobalTechnologyRepository",
    "TechnologyRepository",
    "GlobalTechnologyInMemoryRepository",
    "TechnologyInMemoryRepository",
    "GlobalTechnologyJsonRepository",
    "TechnologyJsonRepository",
    "load_market_prices",
]
