"""Exception types raised by the simulation core."""


class EconSimError(Exception):
    """Base exception for all simulation errors"""
    pass


class ConfigurationError(EconSimError):
    """Raised when static configuration is missing, null, or inconsistent"""
    pass


class TurnInProgressError(EconSimError):
    """Raised by region commands issued while a turn is running.

    A second ``advance_turn`` during a turn does not raise; it returns a
    failed TurnResult instead.
    """
    pass


class UnknownRegionError(EconSimError, KeyError):
    """Raised by mutation entry points that name a region that does not exist"""
    pass
