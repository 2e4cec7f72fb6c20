"""
Summary statistics and the comparative table printed by run_solver.
"""

import json
import math
import os
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from matplotlib.figure import Figure

from .config import STRATEGIES, STRATEGY_NAMES

INSTANCE_WIDTH = 35
COLUMN_WIDTH = 11


def mean_std(samples: Sequence[float]) -> Tuple[float, float]:
    """Mean and sample standard deviation (0 for fewer than 2 samples)."""
    if len(samples) == 0:
        return 0.0, 0.0
    values = np.asarray(samples, dtype=float)
    mean = float(np.mean(values))
    if len(values) < 2:
        return mean, 0.0
    return mean, float(np.std(values, ddof=1))


def _round_half_up(x: float) -> int:
    return int(math.copysign(math.floor(abs(x) + 0.5), x))


def format_measure(mean: float, std: float) -> str:
    """
    Mean rounded at the first significant digit of std, followed by that
    digit in parentheses: format_measure(12.3456, 0.0234) == '12.35(2)'.
    """
    if std <= 0:
        return f"{mean:g}(0)"

    exponent = math.floor(math.log10(std))
    digit = _round_half_up(std / 10 ** exponent)
    # 0.096 rounds up to the next decade
    if digit == 10:
        digit = 1
        exponent += 1

    if exponent < 0:
        text = f"{mean:.{-exponent}f}"
    else:
        factor = 10 ** exponent
        text = f"{_round_half_up(mean / factor) * factor:.0f}"
    return f"{text}({digit})"


def summarize(report) -> Dict[str, Dict[str, float]]:
    """Per strategy: cost/time mean and std."""
    summary = {}
    for strategy in STRATEGIES:
        samples = report.samples[strategy]
        cost_mean, cost_std = mean_std(samples.costs)
        time_mean, time_std = mean_std(samples.times)
        summary[strategy] = {
            'cost_mean': cost_mean,
            'cost_std': cost_std,
            'time_mean': time_mean,
            'time_std': time_std,
        }
    return summary


def improvement_gap(summary: Dict[str, Dict[str, float]],
                    base: str = 'H', target: str = 'ILS') -> float:
    """Relative cost reduction of `target` over `base`, in percent."""
    base_cost = summary[base]['cost_mean']
    if base_cost <= 0:
        return 0.0
    return (base_cost - summary[target]['cost_mean']) / base_cost * 100.0


def _short_name(name: str) -> str:
    if len(name) > INSTANCE_WIDTH - 2:
        return "..." + name[-(INSTANCE_WIDTH - 5):]
    return name


def table_width() -> int:
    return INSTANCE_WIDTH + (COLUMN_WIDTH + 2) * (2 * len(STRATEGIES) + 1)


def print_header(repetitions: int):
    """Banner and column titles of the comparative table."""
    width = table_width()
    title = f"COMPARATIVE REPORT, {repetitions} REPETITIONS: " + " vs ".join(STRATEGIES)
    print("=" * width)
    print(" " + title)
    print("=" * width)

    columns = [f"{'Instance':<{INSTANCE_WIDTH}}"]
    for strategy in STRATEGIES:
        columns.append(f"| {'Cost ' + strategy:<{COLUMN_WIDTH}}")
        columns.append(f"| {'T. ' + strategy + '(s)':<{COLUMN_WIDTH}}")
    columns.append(f"| {'Gap H-ILS%':<{COLUMN_WIDTH}}")
    print("".join(columns))
    print("-" * width)


def format_row(report) -> str:
    summary = summarize(report)
    columns = [f"{_short_name(report.name):<{INSTANCE_WIDTH}}"]
    for strategy in STRATEGIES:
        stats = summary[strategy]
        columns.append(f"| {format_measure(stats['cost_mean'], stats['cost_std']):<{COLUMN_WIDTH}}")
        columns.append(f"| {format_measure(stats['time_mean'], stats['time_std']):<{COLUMN_WIDTH}}")
    columns.append(f"| {improvement_gap(summary):.2f}%")
    return "".join(columns)


def print_footer():
    print("=" * table_width())


def report_to_dict(report) -> dict:
    summary = summarize(report)
    strategies = {}
    for strategy in STRATEGIES:
        samples = report.samples[strategy]
        strategies[strategy] = dict(summary[strategy],
                                    costs=list(samples.costs),
                                    times=list(samples.times))
    return {
        'file': report.path,
        'name': report.name,
        'n_vars': report.n_vars,
        'n_clauses': report.n_clauses,
        'seed': report.seed,
        'worker_id': report.worker_id,
        'gap_h_ils': improvement_gap(summary),
        'strategies': strategies,
    }


def save_json(reports, output: Union[str, os.PathLike], args: Optional[dict] = None,
              skipped: Sequence = ()) -> dict:
    """Write every sample and summary to a timestamped JSON file."""
    results = {
        'timestamp': datetime.now().isoformat(),
        'args': args or {},
        'results': [report_to_dict(r) for r in reports],
        'skipped': [{'file': s.path, 'reason': s.reason} for s in skipped],
    }
    with open(output, 'w', encoding='utf-8') as f:
        json.dump(results, f, indent=2, ensure_ascii=False)
    return results


def plot_costs(reports: List, output: Union[str, os.PathLike]) -> Figure:
    """Box-plot of the cost samples of every strategy, one panel per instance."""
    n = max(1, len(reports))
    fig = Figure(figsize=(12, 3.5 * n))
    axes = fig.subplots(n, 1, squeeze=False)[:, 0]

    for ax, report in zip(axes, reports):
        data = [report.samples[s].costs for s in STRATEGIES]
        ax.boxplot(data)
        ax.set_xticks(range(1, len(STRATEGIES) + 1))
        ax.set_xticklabels([STRATEGY_NAMES[s] for s in STRATEGIES], fontsize=8)
        ax.set_ylabel('Unsatisfied clauses')
        ax.set_title(f"{report.name} ({report.n_vars} vars, {report.n_clauses} clauses)")
        ax.grid(True, alpha=0.3)

    fig.subplots_adjust(hspace=0.6)
    fig.savefig(output, dpi=150, bbox_inches='tight')
    return fig
