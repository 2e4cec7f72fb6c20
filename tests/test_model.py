from maxsat_heuristics.model import (
    EXCLUDED,
    Clause,
    FrequencyEntry,
    TriState,
    completed,
    count_frequencies,
    flip,
    flipped,
    literal_value,
    new_assignment,
)

T, F, U = TriState.TRUE, TriState.FALSE, TriState.UNKNOWN


def test_flip_values():
    assert flipped(T) == F
    assert flipped(F) == T
    assert flipped(U) == T

    assignment = [T, F, U]
    flip(assignment, 0)
    flip(assignment, 2)
    assert assignment == [F, F, T]


def test_new_and_completed_assignment():
    assert new_assignment(3) == [U, U, U]
    assert new_assignment(0) == []
    original = [U, T, U, F]
    assert completed(original) == [F, T, F, F]
    assert original == [U, T, U, F]


def test_literal_value():
    assignment = [T, F, U]
    assert literal_value(1, assignment) == T
    assert literal_value(-1, assignment) == F
    assert literal_value(2, assignment) == F
    assert literal_value(-2, assignment) == T
    assert literal_value(3, assignment) == U
    assert literal_value(-3, assignment) == U


def test_clause_unknown_never_satisfies():
    clause = Clause([1, -2])
    assert not clause.is_satisfied([U, U])
    assert clause.is_satisfied([T, U])
    assert clause.is_satisfied([U, F])
    assert not clause.is_satisfied([F, T])


def test_clause_evaluate_three_valued():
    clause = Clause([1, -2, 3])
    assert clause.evaluate([U, U, U]) == U
    assert clause.evaluate([F, T, U]) == U
    assert clause.evaluate([F, T, F]) == F
    assert clause.evaluate([F, U, T]) == T


def test_clause_variables():
    clause = Clause([3, -1, 3])
    assert clause.variables() == [2, 0, 2]
    assert len(clause) == 3


def test_update_status_decrements_frequencies_once_resolved():
    clause = Clause([1, -2])
    frequencies = [FrequencyEntry(1, 0), FrequencyEntry(0, 1)]

    assert not clause.update_status([F, U], frequencies)
    assert clause.status == U
    assert frequencies == [FrequencyEntry(1, 0), FrequencyEntry(0, 1)]

    assert clause.update_status([F, F], frequencies)
    assert clause.status == T
    assert frequencies == [FrequencyEntry(0, 0), FrequencyEntry(0, 0)]


def test_update_status_falsified_clause():
    clause = Clause([1, 2])
    frequencies = [FrequencyEntry(1, 0), FrequencyEntry(1, 0)]
    assert clause.update_status([F, F], frequencies)
    assert clause.status == F
    assert frequencies[0].pos == 0 and frequencies[1].pos == 0


def test_update_status_without_frequencies():
    clause = Clause([-1])
    assert clause.update_status([F])
    assert clause.status == T


def test_clause_copy_is_independent():
    clause = Clause([1, 2])
    clause.status = T
    clone = clause.copy()
    clone.reset()
    assert clause.status == T
    assert clone.status == U
    assert clone.literals == clause.literals


def test_frequency_entry():
    entry = FrequencyEntry(2, 3)
    assert entry.total == 5
    assert entry.benefit == 3
    assert entry.preferred == F
    assert FrequencyEntry(2, 2).preferred == T
    assert FrequencyEntry(0, 0).preferred == T

    entry.exclude()
    assert entry.pos == EXCLUDED and entry.neg == EXCLUDED
    assert entry.total == 2 * EXCLUDED


def test_count_frequencies():
    frequencies = count_frequencies(3, [(1, -2), (1, 2, -3), (-1,)])
    assert frequencies == [FrequencyEntry(2, 1), FrequencyEntry(1, 1), FrequencyEntry(0, 1)]
