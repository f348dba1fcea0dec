"""Local search for the job shop scheduling problem.

Exports the resource-order encoding, schedules and the solve facade.
"""

from jobshop.errors import MalformedEncodingError, SimulationDeadlockError  # noqa: F401
from jobshop.models import ExitCause, Instance, Operation, SearchResult  # noqa: F401
from jobshop.parser import parse_instance  # noqa: F401
from jobshop.resource_order import ResourceOrder  # noqa: F401
from jobshop.schedule import Schedule  # noqa: F401
from jobshop.solvers import AlgoParams, solve  # noqa: F401

__all__ = [
    "AlgoParams",
    "ExitCause",
    "Instance",
    "MalformedEncodingError",
    "Operation",
    "ResourceOrder",
    "Schedule",
    "SearchResult",
    "SimulationDeadlockError",
    "parse_instance",
    "solve",
]
