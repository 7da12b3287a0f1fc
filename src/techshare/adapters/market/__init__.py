from .in_memory_marketplace import InMemoryMarketInfo, InMemoryMarketplace, Market

__all__ = ["InMemoryMarketInfo", "InMemoryMarketplace", "Market"]
