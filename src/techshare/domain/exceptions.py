"""Exceptions for the technology domain."""


class TechnologyError(Exception):
    """Base exception for technology-related errors."""

    pass


class ContractViolationError(TechnologyError, ValueError):
    """Raised when a caller breaks a precondition of a technology operation.

    Examples are a negative or non-finite subsector demand passed to production,
    or a non-positive effective efficiency reaching a division.
    """

    def __init__(self, message: str, technology_name: str | None = None):
        super().__init__(message)
        self.technology_name = technology_name


class CloneAfterSetupError(TechnologyError, RuntimeError):
    """Raised when a technology holding a shared parameter template is cloned."""

    pass
