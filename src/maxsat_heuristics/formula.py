"""
MaxSAT formula and the search strategies that run over it.

Every strategy takes an assignment (a list of TriState, one entry per
variable) and returns `(assignment, cost)` where the assignment is a fresh
list. Randomized strategies draw only from the `random.Random` passed in.
"""

import math
import random
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .model import (
    Assignment,
    Clause,
    FrequencyEntry,
    TriState,
    completed,
    copy_frequencies,
    flip,
    flipped,
    new_assignment,
)

SearchResult = Tuple[Assignment, int]

PERTURBATION_RATIO = 0.05
TENURE_JITTER = 5


def acceptance_probability(delta: int, temperature: float) -> float:
    """Metropolis criterion: improving and sideways moves are always accepted."""
    if delta <= 0:
        return 1.0
    return math.exp(-delta / temperature)


def perturbation_size(n_vars: int) -> int:
    """
    Number of random flips applied by one ILS perturbation: 5% of the
    variables rounded half up (50 -> 3, 70 -> 4), at least 1.
    """
    return max(1, math.floor(PERTURBATION_RATIO * n_vars + 0.5))


class Formula:
    """
    Ordered collection of clauses with cost evaluation and six heuristics:

    - greedy_assignment      MOM-style constructive assignment
    - local_search           1-flip hill climbing, first improvement
    - iterated_local_search  random k-flip perturbation + local search
    - tabu_search            best non-tabu 1-flip move with aspiration
    - simulated_annealing    Metropolis acceptance, geometric cooling
    - grasp                  randomized RCL construction + local search
    """

    def __init__(self, clauses: Iterable[Union[Clause, Sequence[int]]],
                 n_vars: Optional[int] = None, verbose: bool = False):
        """
        Args:
            clauses: Clause objects or literal sequences (DIMACS style ints)
            n_vars: number of variables; defaults to the largest variable id
            verbose: print progress of the metaheuristics
        """
        self.clauses: List[Clause] = [
            c if isinstance(c, Clause) else Clause(c) for c in clauses
        ]
        max_var = max((abs(lit) for c in self.clauses for lit in c), default=0)
        self.n_vars = max(max_var, n_vars or 0)
        self.verbose = verbose

        # variable index -> indices of the clauses it occurs in
        self.occurrences: List[List[int]] = [[] for _ in range(self.n_vars)]
        self._build_occurrences()

    def _build_occurrences(self):
        for idx, clause in enumerate(self.clauses):
            for var_idx in dict.fromkeys(clause.variables()):
                self.occurrences[var_idx].append(idx)

    def __len__(self):
        return len(self.clauses)

    def copy(self) -> 'Formula':
        """Independent working copy (clause caches included)."""
        clone = Formula.__new__(Formula)
        clone.clauses = [c.copy() for c in self.clauses]
        clone.n_vars = self.n_vars
        clone.verbose = self.verbose
        clone.occurrences = self.occurrences
        return clone

    def reset(self):
        for clause in self.clauses:
            clause.reset()

    # ------------------------------------------------------------------
    # Cost model
    # ------------------------------------------------------------------

    def cost(self, assignment: Sequence[TriState]) -> int:
        """Number of clauses with no true literal."""
        return sum(1 for c in self.clauses if not c.is_satisfied(assignment))

    def unsatisfied_clauses(self, assignment: Sequence[TriState]) -> List[int]:
        return [i for i, c in enumerate(self.clauses) if not c.is_satisfied(assignment)]

    def candidate_variables(self, assignment: Sequence[TriState]) -> List[int]:
        """Sorted variable indices occurring in some unsatisfied clause."""
        candidates = set()
        for clause in self.clauses:
            if not clause.is_satisfied(assignment):
                candidates.update(clause.variables())
        return sorted(candidates)

    def _trivial(self, assignment: Sequence[TriState]) -> Optional[SearchResult]:
        """Result for formulas that leave nothing to search."""
        if not self.clauses:
            return completed(assignment), 0
        if not assignment:
            return [], self.cost(assignment)
        return None

    # ------------------------------------------------------------------
    # Constructive heuristic
    # ------------------------------------------------------------------

    def greedy_assignment(self, frequencies: Sequence[FrequencyEntry]) -> SearchResult:
        """
        Assign variables in order of decreasing open-clause frequency.

        The chosen variable gets the polarity it appears with most often.
        Clauses that become resolved drop out of the frequency counts.
        Works on a private copy of `frequencies` and updates the clause
        status cache of this formula, starting from a cleared cache.
        """
        self.reset()
        frecs = copy_frequencies(frequencies)
        assignment = new_assignment(self.n_vars)
        trivial = self._trivial(assignment)
        if trivial is not None:
            return trivial

        pending = len(assignment)
        while pending > 0:
            var_idx = max(range(len(frecs)), key=lambda j: frecs[j].total)
            entry = frecs[var_idx]
            if entry.pos <= 0 and entry.neg <= 0:
                break

            assignment[var_idx] = entry.preferred
            entry.exclude()

            for clause_idx in self.occurrences[var_idx]:
                clause = self.clauses[clause_idx]
                if clause.status == TriState.UNKNOWN:
                    clause.update_status(assignment, frecs)
            pending -= 1

        assignment = completed(assignment)
        return assignment, self.cost(assignment)

    # ------------------------------------------------------------------
    # Hill climbing
    # ------------------------------------------------------------------

    def local_search(self, assignment: Sequence[TriState]) -> SearchResult:
        """
        First-improvement 1-flip hill climbing.

        Candidates are the variables of the currently unsatisfied clauses.
        The first flip that strictly lowers the cost is kept and the
        candidate set is rebuilt; stops at a local optimum.
        """
        trivial = self._trivial(assignment)
        if trivial is not None:
            return trivial

        current = list(assignment)
        current_cost = self.cost(current)

        improved = True
        while improved and current_cost > 0:
            improved = False
            for var_idx in self.candidate_variables(current):
                old_value = current[var_idx]
                current[var_idx] = flipped(old_value)
                new_cost = self.cost(current)
                if new_cost < current_cost:
                    current_cost = new_cost
                    improved = True
                    break
                current[var_idx] = old_value

        return current, current_cost

    # ------------------------------------------------------------------
    # Iterated local search
    # ------------------------------------------------------------------

    def iterated_local_search(self, assignment: Sequence[TriState], max_iterations: int,
                              rng: random.Random) -> SearchResult:
        """
        Perturb the best known assignment with random flips, descend with
        local_search, and keep the result only if it is strictly better.
        """
        trivial = self._trivial(assignment)
        if trivial is not None:
            return trivial

        best = list(assignment)
        best_cost = self.cost(best)
        n = len(best)
        k = perturbation_size(n)

        for i in range(max_iterations):
            if best_cost == 0:
                break
            current = list(best)
            for _ in range(k):
                flip(current, rng.randrange(n))

            current, current_cost = self.local_search(current)
            if current_cost < best_cost:
                if self.verbose:
                    print(f"   🔄 ILS round {i + 1}: {best_cost} -> {current_cost}")
                best, best_cost = current, current_cost

        return best, best_cost

    # ------------------------------------------------------------------
    # Tabu search
    # ------------------------------------------------------------------

    def best_tabu_move(self, current: Assignment, current_cost: int, best_cost: int,
                       tabu_until: Sequence[int], iteration: int) -> Tuple[Optional[int], int]:
        """
        Variable whose flip gives the smallest cost delta among the allowed
        moves, and that delta. A variable is tabu while iteration <
        tabu_until[var]; a tabu flip is allowed if it beats best_cost.
        Returns (None, 0) when every move is forbidden.
        """
        best_move = None
        best_delta = 0
        for var_idx in range(len(current)):
            old_value = current[var_idx]
            current[var_idx] = flipped(old_value)
            new_cost = self.cost(current)
            current[var_idx] = old_value

            delta = new_cost - current_cost
            is_tabu = iteration < tabu_until[var_idx]
            aspires = new_cost < best_cost
            if (not is_tabu or aspires) and (best_move is None or delta < best_delta):
                best_delta = delta
                best_move = var_idx
        return best_move, best_delta

    def tabu_search(self, assignment: Sequence[TriState], max_iterations: int,
                    tenure: int, rng: random.Random) -> SearchResult:
        """
        Take the best allowed 1-flip move every iteration, even a worsening one.

        A flipped variable stays tabu for `tenure + randint(0, 5)` iterations.
        A tabu move is still allowed when it beats the best known cost
        (aspiration). Returns the best assignment seen, not the last one.
        """
        trivial = self._trivial(assignment)
        if trivial is not None:
            return trivial

        current = list(assignment)
        n = len(current)
        tabu_until = [0] * n

        best = list(current)
        best_cost = self.cost(current)
        current_cost = best_cost

        for iteration in range(1, max_iterations + 1):
            if best_cost == 0:
                break

            best_move, best_delta = self.best_tabu_move(
                current, current_cost, best_cost, tabu_until, iteration)
            if best_move is None:
                continue

            flip(current, best_move)
            current_cost += best_delta
            tabu_until[best_move] = iteration + tenure + rng.randint(0, TENURE_JITTER)

            if current_cost < best_cost:
                if self.verbose:
                    print(f"   🚫 Tabu iteration {iteration}: x{best_move + 1} "
                          f"-> new best {current_cost}")
                best_cost = current_cost
                best = list(current)

        return best, best_cost

    # ------------------------------------------------------------------
    # Simulated annealing
    # ------------------------------------------------------------------

    def simulated_annealing(self, assignment: Sequence[TriState], rng: random.Random,
                            initial_temperature: float = 10.0, alpha: float = 0.95,
                            iterations_per_temperature: int = 100,
                            min_temperature: float = 0.01) -> SearchResult:
        """
        Random 1-flip moves accepted by the Metropolis criterion under a
        geometric cooling schedule T <- alpha * T, stopping at min_temperature.

        Raises:
            ValueError: if alpha is not in (0, 1)
        """
        if not 0.0 < alpha < 1.0:
            raise ValueError(f"alpha must be in (0, 1), got {alpha}")

        trivial = self._trivial(assignment)
        if trivial is not None:
            return trivial

        current = list(assignment)
        n = len(current)
        current_cost = self.cost(current)
        best = list(current)
        best_cost = current_cost

        temperature = initial_temperature
        while temperature > min_temperature and best_cost > 0:
            for _ in range(iterations_per_temperature):
                var_idx = rng.randrange(n)
                old_value = current[var_idx]
                current[var_idx] = flipped(old_value)
                delta = self.cost(current) - current_cost

                if delta < 0:
                    current_cost += delta
                    if current_cost < best_cost:
                        best_cost = current_cost
                        best = list(current)
                elif rng.random() < acceptance_probability(delta, temperature):
                    current_cost += delta
                else:
                    current[var_idx] = old_value

            if self.verbose:
                print(f"   🌡️ T={temperature:.4f} current={current_cost} best={best_cost}")
            temperature *= alpha

        return best, best_cost

    # ------------------------------------------------------------------
    # GRASP
    # ------------------------------------------------------------------

    def grasp_construction(self, frequencies: Sequence[FrequencyEntry], alpha: float,
                           rng: random.Random) -> Assignment:
        """
        Greedy randomized construction.

        Each step draws uniformly from the restricted candidate list: the
        unresolved variables whose benefit max(pos, neg) is at least
        S_max - alpha * (S_max - S_min). alpha = 0 is pure greedy, alpha = 1
        pure random. Only the chosen variable leaves the competition; the
        counts of its neighbours are left untouched.
        """
        frecs = copy_frequencies(frequencies)
        assignment = new_assignment(len(frecs))

        for _ in range(len(assignment)):
            candidates = [(j, frecs[j].benefit) for j, value in enumerate(assignment)
                          if value == TriState.UNKNOWN]
            if not candidates:
                break

            benefits = [b for _, b in candidates]
            s_min, s_max = min(benefits), max(benefits)
            threshold = s_max - alpha * (s_max - s_min)
            rcl = [j for j, b in candidates if b >= threshold]

            chosen = rcl[rng.randrange(len(rcl))]
            assignment[chosen] = frecs[chosen].preferred
            frecs[chosen].exclude()

        return assignment

    def grasp(self, assignment: Sequence[TriState], max_iterations: int, alpha: float,
              rng: random.Random, frequencies: Sequence[FrequencyEntry]) -> SearchResult:
        """
        Independent construction + local_search trials; the lowest cost wins.

        A complete starting assignment is kept as the incumbent, so the
        result is never worse than the input.
        """
        if not self.clauses:
            return completed(new_assignment(self.n_vars)), 0

        best = None
        best_cost = math.inf
        if TriState.UNKNOWN not in assignment:
            best = list(assignment)
            best_cost = self.cost(best)

        for i in range(max_iterations):
            if best_cost == 0:
                break
            constructed = self.grasp_construction(frequencies, alpha, rng)
            current, current_cost = self.local_search(constructed)
            if current_cost < best_cost:
                if self.verbose:
                    print(f"   🎲 GRASP trial {i + 1}: new best {current_cost}")
                best, best_cost = current, current_cost

        if best is None:
            best = completed(assignment)
            best_cost = self.cost(best)
        return best, best_cost
