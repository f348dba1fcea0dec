"""Errors raised while building or decoding a resource order."""


class MalformedEncodingError(ValueError):
    """A machine sequence is not a permutation of that machine's operations."""


class SimulationDeadlockError(RuntimeError):
    """The machine orders and job orders form a cycle; no schedule exists."""
