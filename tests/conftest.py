"""Pytest configuration, shared instances & custom summary hook.

Also ensures the project root is on sys.path so ``import jobshop`` works
without installing the package.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from jobshop.models import Instance  # noqa: E402
from jobshop.parser import parse_instance  # noqa: E402
from jobshop.resource_order import ResourceOrder  # noqa: E402

FIXTURES = Path(__file__).resolve().parent / "fixtures"

# Per-machine orders on aaa1 with known makespans.
GOLDEN_SEQUENCES = [[(0, 0), (1, 1)], [(1, 0), (0, 1)], [(0, 2), (1, 2)]]
ALTERNATIVE_SEQUENCES = [[(0, 0), (1, 1)], [(0, 1), (1, 0)], [(0, 2), (1, 2)]]


@pytest.fixture
def aaa1() -> Instance:
    return parse_instance(str(FIXTURES / "aaa1"))


@pytest.fixture
def ft06() -> Instance:
    return parse_instance(str(FIXTURES / "ft06"))


@pytest.fixture
def golden_order(aaa1: Instance) -> ResourceOrder:
    return ResourceOrder.from_sequences(aaa1, GOLDEN_SEQUENCES)


@pytest.fixture
def alternative_order(aaa1: Instance) -> ResourceOrder:
    return ResourceOrder.from_sequences(aaa1, ALTERNATIVE_SEQUENCES)


@pytest.fixture
def zero_duration_order() -> ResourceOrder:
    """Both machine-0 operations take no time and start together at 0."""
    instance = Instance(
        jobs=[[(0, 0), (1, 1)], [(0, 0), (1, 5)]],
        jobs_number=2,
        machines_number=2,
        name="zero_duration",
    )
    return ResourceOrder.from_sequences(instance, [[(1, 0), (0, 0)], [(1, 1), (0, 1)]])


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:  # noqa: D401
    """Append a compact custom summary at the end of test session."""
    stats = terminalreporter.stats
    collected = terminalreporter._numcollected  # type: ignore[attr-defined]
    passed = len(stats.get("passed", []))
    failed = len(stats.get("failed", []))
    errors = len(stats.get("error", []))
    skipped = len(stats.get("skipped", []))

    terminalreporter.section("Custom summary", sep="=")
    terminalreporter.write_line(
        "Collected: "
        f"{collected} | Passed: {passed} | Failed: {failed} | "
        f"Errors: {errors} | Skipped: {skipped}"
    )
    if failed:
        terminalreporter.write_line("Failed tests:")
        for rep in stats["failed"]:
            terminalreporter.write_line(f"  - {rep.nodeid}")
