"""Exceptions raised by the sort engine."""


class SortVizError(Exception):
    """Base class for every error raised by sortviz."""


class InvalidInputError(SortVizError, ValueError):
    """Input the engine refuses to run on (empty array, non-numbers, unknown algorithm)."""


class InternalConsistencyError(SortVizError, RuntimeError):
    """A trace contradicts itself, e.g. a split references a range with no node."""
