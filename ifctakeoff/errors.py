"""Exception hierarchy."""


class TakeoffError(Exception):
    """Base class for errors raised by ifctakeoff."""


class StoreError(TakeoffError):
    """Raised when the classification store cannot be read or written."""


class SaveInProgressError(StoreError):
    """Raised when a save is already running for the same override key."""
