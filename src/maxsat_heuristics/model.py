"""
Data model for the MaxSAT heuristics.

Variables take three values (unknown / false / true), clauses keep a cached
satisfaction status, and the literal frequency table counts how many
still-open clauses each polarity of a variable appears in.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Sequence, Tuple


class TriState(IntEnum):
    """Three-valued truth value of a variable or a clause."""
    UNKNOWN = -1
    FALSE = 0
    TRUE = 1


# Marks a frequency entry as already chosen
EXCLUDED = -9999

Assignment = List[TriState]


def new_assignment(n_vars: int) -> Assignment:
    """All-unknown assignment for `n_vars` variables."""
    return [TriState.UNKNOWN] * n_vars


def flipped(value: TriState) -> TriState:
    """True becomes False, anything else becomes True."""
    return TriState.FALSE if value == TriState.TRUE else TriState.TRUE


def flip(assignment: Assignment, var_idx: int):
    assignment[var_idx] = flipped(assignment[var_idx])


def completed(assignment: Sequence[TriState]) -> Assignment:
    """Copy of the assignment with every unknown variable forced to False."""
    return [TriState.FALSE if v == TriState.UNKNOWN else v for v in assignment]


def literal_value(literal: int, assignment: Sequence[TriState]) -> TriState:
    """Value of a signed literal under a 3-valued assignment."""
    value = assignment[abs(literal) - 1]
    if value == TriState.UNKNOWN:
        return TriState.UNKNOWN
    if literal > 0:
        return value
    return flipped(value)


@dataclass
class FrequencyEntry:
    """Positive / negative occurrences of one variable in open clauses."""
    pos: int = 0
    neg: int = 0

    @property
    def total(self) -> int:
        return self.pos + self.neg

    @property
    def benefit(self) -> int:
        return max(self.pos, self.neg)

    @property
    def preferred(self) -> TriState:
        """Polarity matching the larger count (True on ties)."""
        return TriState.TRUE if self.pos >= self.neg else TriState.FALSE

    def exclude(self):
        self.pos = EXCLUDED
        self.neg = EXCLUDED

    def count(self, literal: int, step: int = 1):
        if literal > 0:
            self.pos += step
        else:
            self.neg += step


def copy_frequencies(frequencies: Sequence[FrequencyEntry]) -> List[FrequencyEntry]:
    return [FrequencyEntry(f.pos, f.neg) for f in frequencies]


def count_frequencies(n_vars: int, clauses: Sequence[Sequence[int]]) -> List[FrequencyEntry]:
    """Frequency table accumulated over every literal occurrence."""
    frequencies = [FrequencyEntry() for _ in range(n_vars)]
    for clause in clauses:
        for lit in clause:
            frequencies[abs(lit) - 1].count(lit)
    return frequencies


class Clause:
    """
    A disjunction of signed literals.

    `status` is a memo of the last assignment the clause was resolved
    against by the constructive heuristic. Cost evaluation never reads it.
    """

    __slots__ = ('literals', 'status', '_checks')

    def __init__(self, literals: Sequence[int], status: TriState = TriState.UNKNOWN):
        self.literals: Tuple[int, ...] = tuple(literals)
        self.status = status
        # (variable index, value that makes the literal true)
        self._checks = tuple(
            (abs(lit) - 1, TriState.TRUE if lit > 0 else TriState.FALSE)
            for lit in self.literals
        )

    def __len__(self):
        return len(self.literals)

    def __iter__(self):
        return iter(self.literals)

    def __repr__(self):
        return f"Clause({list(self.literals)}, status={self.status.name})"

    def copy(self) -> 'Clause':
        return Clause(self.literals, self.status)

    def reset(self):
        self.status = TriState.UNKNOWN

    def variables(self) -> List[int]:
        """0-based indices of the variables in the clause."""
        return [idx for idx, _ in self._checks]

    def is_satisfied(self, assignment: Sequence[TriState]) -> bool:
        """True if some literal is true. Unknown never satisfies."""
        for idx, wanted in self._checks:
            if assignment[idx] == wanted:
                return True
        return False

    def evaluate(self, assignment: Sequence[TriState]) -> TriState:
        """
        TRUE if some literal is true, FALSE if every literal is resolved
        and none is true, UNKNOWN otherwise.
        """
        pending = False
        for idx, wanted in self._checks:
            value = assignment[idx]
            if value == wanted:
                return TriState.TRUE
            if value == TriState.UNKNOWN:
                pending = True
        return TriState.UNKNOWN if pending else TriState.FALSE

    def update_status(self, assignment: Sequence[TriState],
                      frequencies: Optional[List[FrequencyEntry]] = None) -> bool:
        """
        Re-evaluate the cached status against `assignment`.

        When the clause becomes resolved its literals stop driving the
        greedy choice, so their counts are removed from `frequencies`.
        Returns True if the clause was resolved by this call.
        """
        self.status = self.evaluate(assignment)
        if self.status == TriState.UNKNOWN:
            return False
        if frequencies is not None:
            for lit in self.literals:
                frequencies[abs(lit) - 1].count(lit, -1)
        return True
