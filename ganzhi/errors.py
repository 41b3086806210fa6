"""
Error types raised by the ganzhi derivation engine.

Every error is a ValueError so callers that already guard chart
computation with ``except ValueError`` keep working.
"""


class GanzhiError(ValueError):
    """Base class for derivation failures."""


class MissingInputError(GanzhiError):
    """Birth date (or the data needed to resolve its timezone) is absent."""


class CalendarRangeError(GanzhiError):
    """The calendar-conversion collaborator rejected the date."""


class InvalidPillarError(GanzhiError):
    """A pillar code is not one stem followed by one branch."""


class UnknownEventError(GanzhiError):
    """No favorability profile exists for the requested event category."""
