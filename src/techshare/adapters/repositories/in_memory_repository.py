from typing import Iterable

from ...domain import GlobalTechnology, Technology


class TechnologyInMemoryRepository:
    def __init__(self) -> None:
        self.data: dict[tuple[str, int], Technology] = {}

    def add(self, technology: Technology) -> None:
        self.data[(technology.name, technology.year)] = technology

    def add_list(self, technologies: Iterable[Technology]) -> None:
        for technology in technologies:
            self.add(technology)

    def get(self, name: str, year: int) -> Technology:
        return self.data[(name, year)]

    def list(self) -> list[Technology]:
        return list(self.data.values())


class GlobalTechnologyInMemoryRepository:
    """
    Shared technology templates, keyed by name and vintage year.

    Templates are completed when added, so every technology that binds to one sees validated
    parameters. ``get_technology`` hands out the stored object itself, not a copy.
    """

    def __init__(self) -> None:
        self.data: dict[tuple[str, int], GlobalTechnology] = {}

    def add(self, technology: GlobalTechnology) -> None:
        technology.complete_init()
        self.data[(technology.name, technology.year)] = technology

    def add_list(self, technologies: Iterable[GlobalTechnology]) -> None:
        for technology in technologies:
            self.add(technology)

    def get_technology(self, name: str, year: int) -> GlobalTechnology | None:
        return self.data.get((name, year))

    def list(self) -> list[GlobalTechnology]:
        return list(self.data.values())
