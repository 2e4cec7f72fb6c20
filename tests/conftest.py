import random

import pytest

from maxsat_heuristics.dimacs_loader import generate_random_cnf, write_dimacs_cnf
from maxsat_heuristics.formula import Formula
from maxsat_heuristics.model import TriState, count_frequencies

T = TriState.TRUE
F = TriState.FALSE
U = TriState.UNKNOWN

# (x1 v x2) & (~x1 v x2) & (~x2): no assignment satisfies all three
UNSAT_TRIPLE = [(1, 2), (-1, 2), (-2,)]


@pytest.fixture
def unsat_triple():
    return Formula(UNSAT_TRIPLE, n_vars=2), count_frequencies(2, UNSAT_TRIPLE)


@pytest.fixture
def random_instance():
    """Random 3-CNF at ratio ~4.3 plus the unsatisfiable triple (min cost >= 1)."""
    n_vars, n_clauses = 20, 86
    clauses = generate_random_cnf(n_vars, n_clauses, rng=random.Random(1234)) + UNSAT_TRIPLE
    return Formula(clauses, n_vars=n_vars), count_frequencies(n_vars, clauses)


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def write_cnf(tmp_path):
    """Write a CNF file into tmp_path, return its path."""
    def _write(name, n_vars, clauses, comment=None):
        path = tmp_path / name
        write_dimacs_cnf(path, n_vars, clauses, comment=comment)
        return path
    return _write
