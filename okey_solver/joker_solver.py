"""
Joker-aware Pattern Solver

Extends PatternSolver with one or two jokers. A joker can fill a gap in a
sequence, extend a sequence at either end, or complete a triplet with a
missing colour.

Two jokers are solved two ways and the better result kept:
- together: both jokers go into the same combination
- separately: one joker is placed, then the rest of the hand is solved
  again with the remaining joker

Results are cached under the rules tag and canonical key with a
`_joker1` / `_joker2` suffix.
"""

import itertools
import logging
from typing import Callable, List

from .combinations import (
    Combination, CombinationType, ScoredCombination, Solution, combination_score,
)
from .solver import PatternSolver
from .standard_form import CanonicalForm, StandardForm
from .tiles import MAX_RANK, MIN_RANK, NUM_RANKS, Tile, TileColor, TileMultiset

logger = logging.getLogger(__name__)


class JokerPatternSolver(PatternSolver):
    """Pattern solver that can place up to two jokers"""

    def solve_with_joker(self, pattern: TileMultiset, joker_count: int) -> Solution:
        """
        Find the highest scoring solution for a hand plus jokers.

        Args:
            pattern: The hand without jokers; it is not modified
            joker_count: Number of jokers held (0, 1 or 2)

        Returns:
            Solution whose joker tiles are tagged with is_joker
        """
        if joker_count == 0:
            return self.solve(pattern)
        if joker_count == 1:
            return self.deal_single_joker(pattern)
        if joker_count == 2:
            return self.deal_double_joker(pattern)
        raise ValueError(f"Joker count must be 0, 1 or 2, got {joker_count}")

    def deal_single_joker(self, pattern: TileMultiset) -> Solution:
        standard_form = StandardForm.from_pattern_for_joker(pattern)
        canonical = CanonicalForm.from_pattern(standard_form.pattern)
        key = self._cache_key(canonical, standard_form, 1)

        cached = self.cache.get(key, joker_count=1)
        if cached is not None:
            return standard_form.restore_solution(canonical.restore_solution(cached))

        min_connectivity = self.rules.single_joker_min_connectivity
        candidates = self.adjust_joker_sequence(
            self.joker_sequence_combinations(pattern, 1, min_connectivity)
        )
        candidates += self.joker_triplet_combinations(pattern, 1, min_connectivity)

        solution = self._find_best_solution(candidates, pattern, self.solve)
        self._store(key, solution, standard_form, canonical, 1)
        return solution

    def deal_double_joker(self, pattern: TileMultiset) -> Solution:
        standard_form = StandardForm.from_pattern_for_joker(pattern)
        canonical = CanonicalForm.from_pattern(standard_form.pattern)
        key = self._cache_key(canonical, standard_form, 2)

        cached = self.cache.get(key, joker_count=2)
        if cached is not None:
            return standard_form.restore_solution(canonical.restore_solution(cached))

        together = self.best_solution_with_two_jokers_together(pattern)
        separately = self.best_solution_with_two_jokers_separately(pattern)

        if together.score == separately.score:
            solution = together if together.tile_count >= separately.tile_count else separately
        else:
            solution = together if together.score > separately.score else separately

        logger.debug(
            f"Two jokers: together={together.score}, separately={separately.score}, "
            f"kept {solution.score}"
        )
        self._store(key, solution, standard_form, canonical, 2)
        return solution

    def best_solution_with_two_jokers_together(self, pattern: TileMultiset) -> Solution:
        """Both jokers in one combination, the rest solved without jokers"""
        min_connectivity = self.rules.double_joker_together_min_connectivity
        candidates = self.adjust_joker_sequence(
            self.joker_sequence_combinations(pattern, 2, min_connectivity)
        )
        candidates += self.joker_triplet_combinations(pattern, 2, min_connectivity)
        return self._find_best_solution(candidates, pattern, self.solve)

    def best_solution_with_two_jokers_separately(self, pattern: TileMultiset) -> Solution:
        """One joker placed here, the other left to a single-joker solve of the rest"""
        min_connectivity = self.rules.double_joker_separate_min_connectivity
        candidates = self.adjust_joker_sequence(
            self.joker_sequence_combinations(pattern, 1, min_connectivity)
        )
        candidates += self.joker_triplet_combinations(pattern, 1, min_connectivity)
        return self._find_best_solution(candidates, pattern, self.deal_single_joker)

    def _find_best_solution(
        self,
        candidates: List[Combination],
        pattern: TileMultiset,
        residual_solver: Callable[[TileMultiset], Solution],
    ) -> Solution:
        """
        Score each joker candidate plus the best solution of what it leaves.

        Higher score wins; equal scores prefer the solution covering more
        tiles.
        """
        best = self.solve(pattern) if self.rules.allow_unused_joker else Solution()

        for combination in candidates:
            remaining = pattern.clone()
            for tile in combination.tiles:
                if not tile.is_joker:
                    remaining.remove(tile.rank, tile.color)

            sub_solution = residual_solver(remaining)
            score = combination_score(combination.tiles)
            solution = Solution(
                score + sub_solution.score,
                [ScoredCombination(combination.kind, combination.tiles, score)]
                + sub_solution.combinations,
            )

            if solution.score > best.score or (
                solution.score == best.score and solution.tile_count > best.tile_count
            ):
                best = solution

        return best

    def joker_sequence_combinations(
        self, pattern: TileMultiset, joker_count: int, min_connectivity: int
    ) -> List[Combination]:
        """
        Sequences that use exactly `joker_count` jokers.

        Starting from every tile, grow a window to the right, spending jokers
        on gaps. Each window of 3+ tiles that ends on a real tile becomes a
        candidate, with any unspent jokers appended to the right (or to the
        left once the run reaches 13).

        A window is skipped when it would leave a neighbouring tile of the
        same colour with connectivity between 1 and min_connectivity - 1.
        """
        combinations = []
        for color in TileColor:
            for start in range(MIN_RANK, MAX_RANK + 1):
                if pattern.count(start, color) == 0:
                    continue

                jokers_left = joker_count
                tiles = [Tile(start, color)]
                ends_with_joker = False

                # one step past 13 so unspent jokers can close a run at the top
                for end in range(start + 1, MAX_RANK + 2):
                    size = end - start + jokers_left
                    if 3 <= size <= NUM_RANKS and not ends_with_joker:
                        if self._window_keeps_neighbours(pattern, color, start, end, min_connectivity):
                            padding = self._padding_jokers(color, start, end, jokers_left)
                            combinations.append(Combination(
                                CombinationType.SEQUENCE,
                                tuple(sorted(tiles + padding, key=lambda t: t.rank)),
                            ))

                    if end > MAX_RANK:
                        break
                    if pattern.count(end, color) == 0:
                        if jokers_left == 0:
                            break
                        jokers_left -= 1
                        ends_with_joker = True
                        tiles.append(Tile(end, color, is_joker=True))
                    else:
                        ends_with_joker = False
                        tiles.append(Tile(end, color))

        return combinations

    @staticmethod
    def _window_keeps_neighbours(
        pattern: TileMultiset, color: TileColor, start: int, end: int, min_connectivity: int
    ) -> bool:
        remaining = pattern.clone()
        for rank in range(start, end):
            remaining.remove(rank, color)

        neighbours = []
        if start > MIN_RANK:
            neighbours.append(start - 1)
        if end <= MAX_RANK:
            neighbours.append(end)

        for rank in neighbours:
            connectivity = remaining.connectivity(rank, color)
            if 0 < connectivity < min_connectivity:
                return False
        return True

    @staticmethod
    def _padding_jokers(color: TileColor, start: int, end: int, count: int) -> List[Tile]:
        """Jokers appended after rank end - 1, wrapping to the left of start past 13"""
        jokers = []
        position, step = end, 1
        for _ in range(count):
            if position > MAX_RANK:
                position, step = start - 1, -1
            jokers.append(Tile(position, color, is_joker=True))
            position += step
        return jokers

    def joker_triplet_combinations(
        self, pattern: TileMultiset, joker_count: int, min_connectivity: int
    ) -> List[Combination]:
        """
        Same-rank groups completed by jokers in missing colours.

        One joker joins two or three real colours. Two jokers join exactly
        two real colours to make a four-colour group. A candidate is skipped
        if a colour left out at that rank would drop below min_connectivity.
        """
        group_sizes = (2, 3) if joker_count == 1 else (2,)
        combinations = []
        for rank in range(MIN_RANK, MAX_RANK + 1):
            colors = pattern.colors_present_at_rank(rank)
            if len(colors) < 2:
                continue

            for size in group_sizes:
                for chosen in itertools.combinations(colors, size):
                    remaining = pattern.clone()
                    for color in chosen:
                        remaining.remove(rank, color)

                    if any(
                        remaining.connectivity(rank, color) < min_connectivity
                        for color in colors if color not in chosen
                    ):
                        continue

                    unused = [c for c in TileColor if c not in chosen]
                    tiles = [Tile(rank, c) for c in chosen]
                    tiles += [Tile(rank, c, is_joker=True) for c in unused[:joker_count]]
                    combinations.append(Combination(CombinationType.TRIPLET, tuple(tiles)))

        return combinations

    @staticmethod
    def adjust_joker_sequence(combinations: List[Combination]) -> List[Combination]:
        """
        Rewrite joker-joker-13 sequences as triplets of 13.

        Two jokers next to a lone 13 score more as 13s in two other colours
        than as 11 and 12.
        """
        adjusted = []
        for combination in combinations:
            if (
                combination.kind == CombinationType.SEQUENCE
                and len(combination.tiles) == 3
                and combination.joker_count == 2
            ):
                real = [t for t in combination.tiles if not t.is_joker][0]
                if real.rank == MAX_RANK:
                    others = [c for c in TileColor if c != real.color]
                    combination = Combination(
                        CombinationType.TRIPLET,
                        (real,) + tuple(Tile(MAX_RANK, c, is_joker=True) for c in others[:2]),
                    )
            adjusted.append(combination)
        return adjusted

    def _cache_key(self, canonical: CanonicalForm, standard_form: StandardForm, joker_count: int) -> str:
        return (
            f"{self.rules.fingerprint()}:"
            f"{canonical.key(standard_form.number_offset)}_joker{joker_count}"
        )

    def _store(
        self,
        key: str,
        solution: Solution,
        standard_form: StandardForm,
        canonical: CanonicalForm,
        joker_count: int,
    ) -> None:
        standard_solution = standard_form.standardize_solution(solution)
        self.cache.set(key, canonical.canonicalize_solution(standard_solution), joker_count=joker_count)
