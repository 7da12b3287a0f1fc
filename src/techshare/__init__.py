"""Technology cost, market share, production and emissions for energy-economy models."""

__version__ = "0.3.0"
