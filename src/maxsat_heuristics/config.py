"""
Parameters of one benchmark run.
"""

from dataclasses import asdict, dataclass
from typing import Optional

STRATEGIES = ('H', 'LS', 'ILS', 'TS', 'SA', 'GRASP')

STRATEGY_NAMES = {
    'H': 'Greedy heuristic',
    'LS': 'Local search',
    'ILS': 'Iterated local search',
    'TS': 'Tabu search',
    'SA': 'Simulated annealing',
    'GRASP': 'GRASP',
}


@dataclass
class SearchParams:
    """Repetition count and per-strategy parameters."""
    repetitions: int = 30
    ils_iterations: int = 20
    tabu_iterations: int = 100
    tabu_tenure: Optional[int] = None   # None -> 7 + n_vars // 10
    sa_initial_temperature: float = 10.0
    sa_alpha: float = 0.98
    sa_iterations_per_temperature: int = 100
    sa_min_temperature: float = 0.01
    grasp_iterations: int = 20
    grasp_alpha: float = 0.2

    def __post_init__(self):
        for name in ('repetitions', 'ils_iterations', 'tabu_iterations',
                     'sa_iterations_per_temperature', 'grasp_iterations'):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.tabu_tenure is not None and self.tabu_tenure < 0:
            raise ValueError(f"tabu_tenure must be >= 0, got {self.tabu_tenure}")
        if not 0.0 < self.sa_alpha < 1.0:
            raise ValueError(f"sa_alpha must be in (0, 1), got {self.sa_alpha}")
        if self.sa_min_temperature <= 0:
            raise ValueError(f"sa_min_temperature must be > 0, got {self.sa_min_temperature}")
        if not 0.0 <= self.grasp_alpha <= 1.0:
            raise ValueError(f"grasp_alpha must be in [0, 1], got {self.grasp_alpha}")

    def tenure_for(self, n_vars: int) -> int:
        if self.tabu_tenure is not None:
            return self.tabu_tenure
        return 7 + n_vars // 10

    def to_dict(self) -> dict:
        return asdict(self)
