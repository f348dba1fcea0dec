"""Command line entry point: ``jobshop --config run.yaml``.

Config keys (YAML or JSON)::

    instance: tests/fixtures/ft06   # file or directory of instance files
    solver: tabu                    # spt | lrpt | est_spt | est_lrpt | descent | tabu
    initial: est_spt                # start heuristic for descent / tabu
    time_limit_ms: 10000            # optional
    log_level: INFO
    tabu: {iterations: 100, tenure: 10}
    charts: {enabled: false, dir: charts}
    trace_dir: null                 # per-iteration CSV traces
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import yaml

from jobshop.algorithms.base import deadline_from_ms
from jobshop.models import SearchResult
from jobshop.parser import parse_instance
from jobshop.solvers import AlgoParams, solve
from jobshop.visualization import save_convergence_plot, save_gantt_chart

logger = logging.getLogger("jssp")


def load_config(config_file: str) -> Dict[str, Any]:
    """Load configuration from a YAML (``.yml``/``.yaml``) or JSON file."""
    if not os.path.isfile(config_file):
        raise FileNotFoundError(f"Config file not found: {config_file}")
    with open(config_file, "r", encoding="utf-8") as f:
        text = f.read()
    if config_file.endswith((".yml", ".yaml")):
        cfg = yaml.safe_load(text) or {}
    else:
        cfg = json.loads(text)
    if not isinstance(cfg, dict):
        raise ValueError("Config root must be a mapping")
    return cfg


def _instance_files(path: str) -> List[str]:
    if os.path.isdir(path):
        return sorted(
            os.path.join(path, f)
            for f in os.listdir(path)
            if not f.startswith(".") and os.path.isfile(os.path.join(path, f))
        )
    return [path]


def run(cfg: Dict[str, Any]) -> List[Tuple[str, SearchResult]]:
    """Solve every configured instance and return ``(name, result)`` pairs."""
    instance_path = cfg.get("instance")
    if not instance_path:
        raise ValueError("Missing 'instance' key in config")
    solver = cfg.get("solver", "tabu")
    tabu_cfg = cfg.get("tabu", {}) if isinstance(cfg.get("tabu"), dict) else {}
    charts_cfg = cfg.get("charts", {}) if isinstance(cfg.get("charts"), dict) else {}
    trace_dir: Optional[str] = cfg.get("trace_dir")
    time_limit_ms = cfg.get("time_limit_ms")
    params = AlgoParams(
        tabu_iterations=int(tabu_cfg.get("iterations", 100)),
        tabu_tenure=int(tabu_cfg.get("tenure", 10)),
        initial=cfg.get("initial", "est_spt"),
    )

    results = []
    for path in _instance_files(instance_path):
        instance = parse_instance(path)
        trace_file = None
        if trace_dir:
            os.makedirs(trace_dir, exist_ok=True)
            trace_file = os.path.join(trace_dir, f"{instance.name}_{solver}.csv")
        deadline = deadline_from_ms(int(time_limit_ms)) if time_limit_ms is not None else None
        result = solve(solver, instance, deadline=deadline, params=params, trace_file=trace_file)
        logger.info(
            "file=%s solver=%s makespan=%s exit=%s iterations=%d",
            instance.name,
            solver,
            result.makespan,
            result.exit_cause.value,
            result.iterations,
        )
        if charts_cfg.get("enabled"):
            charts_dir = charts_cfg.get("dir", "charts")
            save_gantt_chart(
                result.schedule, os.path.join(charts_dir, f"gantt_{instance.name}_{solver}.png")
            )
            save_convergence_plot(
                result.history,
                os.path.join(charts_dir, f"convergence_{instance.name}_{solver}.png"),
                label=solver,
            )
        results.append((instance.name, result))
    return results


def cli(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Job shop local search (config only)")
    parser.add_argument("--config", required=True, help="Path to YAML/JSON config file")
    args = parser.parse_args(argv)

    cfg = load_config(args.config)
    log_level = cfg.get("log_level", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    for name, result in run(cfg):
        print(f"{name} {cfg.get('solver', 'tabu')} {result.makespan} {result.exit_cause.value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(cli())
