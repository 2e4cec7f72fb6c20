"""
DIMACS CNF loading and benchmark folder helpers.
"""

import os
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import networkx as nx

from .formula import Formula
from .model import FrequencyEntry


class DimacsError(ValueError):
    """The file is not a usable DIMACS CNF instance."""
    pass


@dataclass
class CnfInstance:
    """Parsed CNF file: clause literals plus the per-variable frequency table."""
    name: str
    n_vars: int
    n_clauses: int
    clauses: List[Tuple[int, ...]] = field(default_factory=list)
    frequencies: List[FrequencyEntry] = field(default_factory=list)

    def to_formula(self, verbose: bool = False) -> Formula:
        return Formula(self.clauses, n_vars=self.n_vars, verbose=verbose)


def _read_preamble(line: str, lineno: int) -> Tuple[int, int]:
    parts = line.split()
    if len(parts) < 4 or parts[1].lower() != 'cnf':
        raise DimacsError(f"line {lineno}: bad problem line {line!r}")
    try:
        n_vars, n_clauses = int(parts[2]), int(parts[3])
    except ValueError:
        raise DimacsError(f"line {lineno}: bad problem line {line!r}") from None
    if n_vars < 0 or n_clauses < 0:
        raise DimacsError(f"line {lineno}: negative sizes in {line!r}")
    return n_vars, n_clauses


def parse_dimacs_cnf(filename: Union[str, os.PathLike]) -> CnfInstance:
    """
    Parse a DIMACS CNF file.

    Args:
        filename: Path to the DIMACS CNF file

    Returns:
        CnfInstance with the clauses in file order and the literal
        frequencies counted while reading them

    Raises:
        DimacsError: missing/malformed preamble, bad literal
        OSError: the file cannot be read
    """
    path = Path(filename)
    n_vars = None
    n_clauses = 0
    clauses = []
    frequencies = []

    with open(path, 'r') as f:
        for lineno, line in enumerate(f, 1):
            line = line.strip()

            # Skip comments and empty lines
            if not line or line.startswith('c'):
                continue
            # SATLIB trailer
            if line.startswith('%'):
                break

            if line.startswith('p'):
                if n_vars is not None:
                    raise DimacsError(f"line {lineno}: duplicate problem line")
                n_vars, n_clauses = _read_preamble(line, lineno)
                frequencies = [FrequencyEntry() for _ in range(n_vars)]
                continue

            if not (line[0].isdigit() or line[0] == '-'):
                continue
            if n_vars is None:
                raise DimacsError(f"line {lineno}: clause before 'p cnf' preamble")

            literals = []
            for token in line.split():
                try:
                    lit = int(token)
                except ValueError:
                    raise DimacsError(f"line {lineno}: bad literal {token!r}") from None
                if lit == 0:
                    break
                if abs(lit) > n_vars:
                    raise DimacsError(f"line {lineno}: literal {lit} exceeds {n_vars} variables")
                literals.append(lit)

            if not literals:
                continue
            for lit in literals:
                frequencies[abs(lit) - 1].count(lit)
            clauses.append(tuple(literals))

    if n_vars is None:
        raise DimacsError(f"{path.name}: no 'p cnf' preamble")

    return CnfInstance(path.name, n_vars, n_clauses, clauses, frequencies)


def load_benchmark_folder(folder_path: Union[str, os.PathLike]) -> List[Path]:
    """Sorted .cnf files of a folder, or the path itself if it is a file."""
    path = Path(folder_path)
    if path.is_file():
        return [path]
    if path.is_dir():
        return sorted(p for p in path.glob("*.cnf") if p.is_file())
    raise FileNotFoundError(f"{path} is neither a .cnf file nor a folder")


def build_interaction_graph(n_vars: int, clauses) -> nx.Graph:
    """Variables as nodes, edge weight = number of clauses shared."""
    graph = nx.Graph()
    graph.add_nodes_from(range(1, n_vars + 1))

    for clause in clauses:
        vars_in_clause = sorted(set(abs(lit) for lit in clause))
        for i in range(len(vars_in_clause)):
            for j in range(i + 1, len(vars_in_clause)):
                v1, v2 = vars_in_clause[i], vars_in_clause[j]
                if graph.has_edge(v1, v2):
                    graph[v1][v2]['weight'] += 1
                else:
                    graph.add_edge(v1, v2, weight=1)
    return graph


def benchmark_info(instance: CnfInstance) -> dict:
    """Size, density, clause length and interaction graph statistics."""
    graph = build_interaction_graph(instance.n_vars, instance.clauses)
    lengths = [len(c) for c in instance.clauses]
    degrees = [d for _, d in graph.degree()]

    return {
        'name': instance.name,
        'n_vars': instance.n_vars,
        'n_clauses': len(instance.clauses),
        'declared_clauses': instance.n_clauses,
        'density': len(instance.clauses) / max(1, instance.n_vars),
        'min_length': min(lengths, default=0),
        'max_length': max(lengths, default=0),
        'avg_length': sum(lengths) / len(lengths) if lengths else 0.0,
        'components': nx.number_connected_components(graph) if instance.n_vars else 0,
        'avg_degree': sum(degrees) / len(degrees) if degrees else 0.0,
    }


def print_benchmark_info(instance: CnfInstance) -> dict:
    """Pretty-print benchmark_info for one instance."""
    info = benchmark_info(instance)
    print(f"📄 {info['name']}:")
    print(f"   Variables: {info['n_vars']}")
    print(f"   Clauses: {info['n_clauses']} (declared {info['declared_clauses']})")
    print(f"   Density: {info['density']:.2f}")
    if info['n_clauses']:
        print(f"   Lengths: min={info['min_length']}, max={info['max_length']}, "
              f"avg={info['avg_length']:.2f}")
    print(f"   Interaction graph: {info['components']} components, "
          f"avg degree {info['avg_degree']:.2f}")
    print()
    return info


def generate_random_cnf(n_vars: int, n_clauses: int, k: int = 3,
                        rng: Optional[random.Random] = None) -> List[Tuple[int, ...]]:
    """
    Random k-CNF formula: k distinct variables per clause, random signs.

    Args:
        n_vars: Number of variables (at least k)
        n_clauses: Number of clauses
        rng: random source; a fresh unseeded one if omitted
    """
    rng = rng or random.Random()
    formula = []
    for _ in range(n_clauses):
        vars_selected = rng.sample(range(1, n_vars + 1), k)
        formula.append(tuple(v if rng.random() < 0.5 else -v for v in vars_selected))
    return formula


def write_dimacs_cnf(filename: Union[str, os.PathLike], n_vars: int, clauses,
                     comment: Optional[str] = None):
    with open(filename, 'w') as f:
        if comment:
            for line in comment.splitlines():
                f.write(f"c {line}\n")
        f.write(f"p cnf {n_vars} {len(clauses)}\n")
        for clause in clauses:
            f.write(" ".join(str(lit) for lit in clause) + " 0\n")
