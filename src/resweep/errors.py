# Copyright (c) Syntropy Systems
"""Exception types raised by resweep."""


class ResweepError(Exception):
    """Base class for resweep errors."""


class ConfigurationError(ResweepError, ValueError):
    """Invalid run configuration, raised before any sweep executes."""


class ProblemLoadError(ResweepError):
    """The problem factory could not be imported or called."""
