"""
Heuristic MaxSAT search: greedy construction, hill climbing, ILS, tabu
search, simulated annealing and GRASP over one unsatisfied-clause cost.
"""

from .config import STRATEGIES, SearchParams
from .dimacs_loader import CnfInstance, DimacsError, parse_dimacs_cnf
from .formula import Formula, acceptance_probability
from .model import Clause, FrequencyEntry, TriState

__version__ = "0.1.0"

__all__ = [
    'Clause',
    'CnfInstance',
    'DimacsError',
    'Formula',
    'FrequencyEntry',
    'STRATEGIES',
    'SearchParams',
    'TriState',
    'acceptance_probability',
    'parse_dimacs_cnf',
]
