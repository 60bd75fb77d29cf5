"""
Pattern Solver

Finds the highest scoring split of a hand into sequences and triplets.

Flow for one hand:
1. Drop tiles that can never score
2. Split the rest into independent components
3. Standardize each component and search it recursively, consulting the
   cache for every distinct sub-hand
4. Map the results back and merge them

Scores are the sum of tile ranks. The search works in shifted coordinate
frames, so it carries the frame's rank offset to score tiles at face value.
"""

import logging
from typing import List, Optional

from .cache import PatternCache
from .combinations import (
    Combination, CombinationType, ScoredCombination, Solution, combination_score,
)
from .preprocess import preprocess, split_by_connectivity
from .rules import DEFAULT_RULES, SolverRules
from .standard_form import CanonicalForm, StandardForm
from .tiles import MAX_RANK, MIN_RANK, Tile, TileColor, TileMultiset

logger = logging.getLogger(__name__)


class PatternSolver:
    """
    Exhaustive best-combination search with memoization.

    Args:
        cache: Solution cache to use; a private one is created if omitted
        rules: Solver settings
    """

    def __init__(self, cache: Optional[PatternCache] = None, rules: Optional[SolverRules] = None):
        self.rules = rules if rules is not None else DEFAULT_RULES
        self.cache = cache if cache is not None else PatternCache(max_size=self.rules.cache_size)

    def solve(self, pattern: TileMultiset) -> Solution:
        """
        Find the highest scoring solution for a hand.

        Args:
            pattern: The hand; it is not modified

        Returns:
            Solution with tiles in the hand's own coordinates
        """
        solution = self._solve_pattern(pattern, 0)
        logger.debug(f"Solved {pattern.total_count()} tiles: score {solution.score}")
        return solution

    def _solve_pattern(self, pattern: TileMultiset, offset: int) -> Solution:
        """Solve a hand whose ranks sit `offset` below their face values"""
        preprocessed = preprocess(pattern)
        if preprocessed.is_empty():
            return Solution()

        solutions = []
        for component in split_by_connectivity(preprocessed):
            standard_form = StandardForm.from_pattern(component)
            standard_solution = self._solve_standard_form(
                standard_form.pattern, offset + standard_form.number_offset
            )
            solutions.append(standard_form.restore_solution(standard_solution))

        return Solution.merge(solutions)

    def _solve_standard_form(self, pattern: TileMultiset, offset: int) -> Solution:
        """Solve a standardized component, checking the cache first"""
        canonical = CanonicalForm.from_pattern(pattern)
        key = f"{self.rules.fingerprint()}:{canonical.key(offset)}"

        cached = self.cache.get(key)
        if cached is not None:
            return canonical.restore_solution(cached)

        solution = self._find_best_combination(pattern, offset)
        self.cache.set(key, canonical.canonicalize_solution(solution))
        return solution

    def _find_best_combination(self, pattern: TileMultiset, offset: int) -> Solution:
        """
        Try every candidate combination and recurse on what is left.

        The first candidate reaching the best score wins ties.
        """
        best = Solution()
        candidates = self.find_all_sequences(pattern) + self.find_all_triplets(pattern)

        for combination in candidates:
            remaining = pattern.clone()
            for tile in combination.tiles:
                remaining.remove(tile.rank, tile.color)

            sub_solution = self._solve_pattern(remaining, offset)
            score = combination_score(combination.tiles, offset)

            if score + sub_solution.score > best.score:
                best = Solution(
                    score + sub_solution.score,
                    [ScoredCombination(combination.kind, combination.tiles, score)]
                    + sub_solution.combinations,
                )

        return best

    def find_all_sequences(self, pattern: TileMultiset) -> List[Combination]:
        """Every run of 3+ consecutive same-colour tiles, sub-runs included"""
        sequences = []
        for color in TileColor:
            for run_start, run_end in pattern.maximal_runs(color):
                for start in range(run_start, run_end - 1):
                    for end in range(run_end, start + 1, -1):
                        sequences.append(Combination(
                            CombinationType.SEQUENCE,
                            tuple(Tile(rank, color) for rank in range(start, end + 1)),
                        ))
        return sequences

    def find_all_triplets(self, pattern: TileMultiset) -> List[Combination]:
        """
        Every same-rank group of 3+ colours.

        At a four-colour rank the three-colour groups are also tried when
        the left-out tile is a single copy inside a run of 3+, or when the
        other three colours hold more than four tiles between them.
        """
        triplets = []
        for rank in range(MIN_RANK, MAX_RANK + 1):
            colors = pattern.colors_present_at_rank(rank)
            if len(colors) < 3:
                continue

            triplets.append(Combination(
                CombinationType.TRIPLET, tuple(Tile(rank, c) for c in colors)
            ))

            if len(colors) < 4 or not self.rules.split_tetrads:
                continue

            for color in colors:
                others = [c for c in colors if c != color]
                frees_run_tile = (
                    pattern.run_length(rank, color) >= 3 and pattern.count(rank, color) < 2
                )
                others_total = sum(pattern.count(rank, c) for c in others)
                if frees_run_tile or others_total > 4:
                    triplets.append(Combination(
                        CombinationType.TRIPLET, tuple(Tile(rank, c) for c in others)
                    ))

        return triplets

    def cache_stats(self):
        """Per-entry cache statistics"""
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()
