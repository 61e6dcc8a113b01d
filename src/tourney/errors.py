"""Error kinds raised by the fixture engine.

Scheduling conflicts are not errors: the optimizer returns them as data.
Only bad input raises, and it raises before any work is done.
"""

from __future__ import annotations


class TourneyError(Exception):
    """Base class for every error the engine raises."""


class InsufficientTeamsError(TourneyError, ValueError):
    """Raised when a competition or group has fewer than two teams."""


class InvalidConfigurationError(TourneyError, ValueError):
    """Raised when a config option is out of range or cannot be parsed."""
