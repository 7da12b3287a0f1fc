from typing import Iterable, Protocol, runtime_checkable

from ...domain import GlobalTechnology, Technology


@runtime_checkable
class TechnologyRepository(Protocol):
    def add(self, technology: Technology) -> None:
        """Add a technology vintage to the repository."""
        ...

    def add_list(self, technologies: Iterable[Technology]) -> None:
        """Add an iterable of technology vintages to the repository."""
        ...

    def get(self, name: str, year: int) -> Technology:
        """Get a technology vintage by name and year."""
        ...

    def list(self) -> list[Technology]:
        """Get a list of all technology vintages."""
        ...


@runtime_checkable
class GlobalTechnologyRepository(Protocol):
    def add(self, technology: GlobalTechnology) -> None:
        """Add a shared technology template."""
        ...

    def get_technology(self, name: str, year: int) -> GlobalTechnology | None:
        """Get the completed template of a technology vintage, or None if there is none."""
        ...

    def list(self) -> list[GlobalTechnology]:
        """Get a list of all templates."""
        ...
