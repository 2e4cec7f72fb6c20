"""
Benchmark driver: runs every strategy N times per CNF instance.

One task per instance, spread over a process pool. Each task seeds its own
random.Random from the instance path and its worker slot, keeps all cost and
time samples locally, and hands a finished InstanceReport back to the parent
process, which is the only writer of the output.
"""

import hashlib
import os
import random
import threading
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .config import STRATEGIES, SearchParams
from .dimacs_loader import CnfInstance, DimacsError, load_benchmark_folder, parse_dimacs_cnf
from .formula import Formula
from .model import new_assignment


@dataclass
class StrategySamples:
    """One cost and one wall-clock duration per repetition."""
    costs: List[int] = field(default_factory=list)
    times: List[float] = field(default_factory=list)

    def add(self, cost: int, elapsed: float):
        self.costs.append(cost)
        self.times.append(elapsed)


@dataclass
class InstanceReport:
    name: str
    path: str
    n_vars: int
    n_clauses: int
    seed: int
    worker_id: int
    samples: Dict[str, StrategySamples] = field(
        default_factory=lambda: {s: StrategySamples() for s in STRATEGIES})


@dataclass
class SkippedInstance:
    path: str
    reason: str


def derive_seed(instance_id: str, worker_id: int) -> int:
    """Stable across processes and interpreter runs (unlike hash())."""
    digest = hashlib.md5(instance_id.encode('utf-8')).digest()
    return int.from_bytes(digest[:8], 'big') + worker_id


def _timed(func: Callable, *args, **kwargs):
    start = time.perf_counter()
    result = func(*args, **kwargs)
    return result, time.perf_counter() - start


def run_repetition(base: Formula, instance: CnfInstance, params: SearchParams,
                   rng: random.Random) -> Dict[str, Tuple[int, float]]:
    """
    One repetition of all six strategies on a fresh copy of the base formula.

    LS, ILS, TS and SA start from the greedy assignment; GRASP starts from
    an all-unknown vector and builds its own solutions.
    """
    formula = base.copy()
    results = {}

    (greedy, cost), elapsed = _timed(formula.greedy_assignment, instance.frequencies)
    results['H'] = (cost, elapsed)

    (_, cost), elapsed = _timed(formula.local_search, greedy)
    results['LS'] = (cost, elapsed)

    (_, cost), elapsed = _timed(formula.iterated_local_search, greedy,
                                params.ils_iterations, rng)
    results['ILS'] = (cost, elapsed)

    (_, cost), elapsed = _timed(formula.tabu_search, greedy, params.tabu_iterations,
                                params.tenure_for(instance.n_vars), rng)
    results['TS'] = (cost, elapsed)

    (_, cost), elapsed = _timed(
        formula.simulated_annealing, greedy, rng,
        initial_temperature=params.sa_initial_temperature,
        alpha=params.sa_alpha,
        iterations_per_temperature=params.sa_iterations_per_temperature,
        min_temperature=params.sa_min_temperature,
    )
    results['SA'] = (cost, elapsed)

    (_, cost), elapsed = _timed(formula.grasp, new_assignment(instance.n_vars),
                                params.grasp_iterations, params.grasp_alpha, rng,
                                instance.frequencies)
    results['GRASP'] = (cost, elapsed)

    return results


def run_instance(path: Union[str, os.PathLike], params: SearchParams,
                 worker_id: int = 0, verbose: bool = False) -> InstanceReport:
    """
    Load one instance and run params.repetitions repetitions on it.

    Raises:
        DimacsError, OSError: the instance is unavailable
    """
    instance = parse_dimacs_cnf(path)
    base = instance.to_formula(verbose=verbose)
    seed = derive_seed(str(path), worker_id)
    rng = random.Random(seed)

    report = InstanceReport(
        name=instance.name,
        path=str(path),
        n_vars=instance.n_vars,
        n_clauses=len(instance.clauses),
        seed=seed,
        worker_id=worker_id,
    )

    for rep in range(params.repetitions):
        results = run_repetition(base, instance, params, rng)
        for strategy, (cost, elapsed) in results.items():
            report.samples[strategy].add(cost, elapsed)
        if verbose:
            costs = ", ".join(f"{s}={results[s][0]}" for s in STRATEGIES)
            print(f"   🔁 {instance.name} repetition {rep + 1}/{params.repetitions}: {costs}")

    return report


def run_benchmark(paths: Sequence[Union[str, os.PathLike]], params: SearchParams,
                  workers: Optional[int] = None,
                  on_report: Optional[Callable[[InstanceReport], None]] = None,
                  on_skip: Optional[Callable[[SkippedInstance], None]] = None,
                  verbose: bool = False) -> Tuple[List[InstanceReport], List[SkippedInstance]]:
    """
    Run every instance, one task per file.

    Callbacks fire once per finished (or skipped) instance, in completion
    order, under a lock. Returned reports follow the order of `paths`.

    Args:
        workers: pool size; None uses os.cpu_count(), 1 runs inline
    """
    workers = workers or os.cpu_count() or 1
    lock = threading.Lock()
    finished: Dict[str, InstanceReport] = {}
    skipped: List[SkippedInstance] = []

    def emit_report(report):
        with lock:
            finished[report.path] = report
            if on_report is not None:
                on_report(report)

    def emit_skip(path, error):
        item = SkippedInstance(str(path), f"{type(error).__name__}: {error}")
        with lock:
            skipped.append(item)
            if on_skip is not None:
                on_skip(item)

    if workers == 1 or len(paths) <= 1:
        for path in paths:
            try:
                emit_report(run_instance(path, params, 0, verbose))
            except (DimacsError, OSError) as e:
                emit_skip(path, e)
    else:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(run_instance, path, params, i % workers, verbose): path
                for i, path in enumerate(paths)
            }
            for future in as_completed(futures):
                try:
                    emit_report(future.result())
                except (DimacsError, OSError) as e:
                    emit_skip(futures[future], e)

    reports = [finished[str(p)] for p in paths if str(p) in finished]
    return reports, skipped


def collect_paths(targets: Sequence[Union[str, os.PathLike]]) -> List[Path]:
    """
    Expand folders into their .cnf files. Other paths are kept as given so
    that unreadable ones are reported as skipped instances.
    """
    paths = []
    for target in targets:
        target = Path(target)
        if target.is_dir():
            paths.extend(load_benchmark_folder(target))
        else:
            paths.append(target)
    return paths
