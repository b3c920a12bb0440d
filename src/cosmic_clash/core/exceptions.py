class DomainError(Exception):
    """Base class for domain-specific errors."""

    pass


class SlotNotFoundError(DomainError):
    """Exception raised when a slot id other than 1 or 2 is requested."""

    pass


class ContestRejectedError(DomainError):
    """Exception raised when a contest cannot be started in the current state."""

    pass


class ContestNotRunningError(DomainError):
    """Exception raised when cancelling while no contest is running."""

    pass


class HistoryEntryNotFoundError(DomainError):
    """Exception raised when a history entry id is unknown."""

    pass


class NothingToExportError(DomainError):
    """Exception raised when exporting before a complete contest exists."""

    pass


class NoImageToEditError(DomainError):
    """Exception raised when editing artwork that has not been generated."""

    pass
