"""
Tests for the joker-free pattern solver
"""

from collections import Counter

import pytest
import numpy as np

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from okey_solver.tiles import Tile, TileColor, TileMultiset
from okey_solver.combinations import CombinationType, Solution
from okey_solver.cache import PatternCache
from okey_solver.rules import SolverRules, DEFAULT_RULES, FAST_RULES
from okey_solver.solver import PatternSolver
from okey_solver.parser import PatternParser

RED, BLACK, BLUE, YELLOW = TileColor.RED, TileColor.BLACK, TileColor.BLUE, TileColor.YELLOW
hand = PatternParser.from_rank_lists


def assert_valid_solution(pattern: TileMultiset, solution: Solution):
    """Combinations use only tiles from the hand and scores add up"""
    used = Counter((t.rank, t.color) for c in solution.combinations for t in c.tiles)
    for (rank, color), count in used.items():
        assert count <= pattern.count(rank, color), f"{color.name} {rank} used {count} times"

    assert solution.score == sum(c.score for c in solution.combinations)
    for combination in solution.combinations:
        assert combination.score == sum(t.rank for t in combination.tiles)


class TestPatternSolver:
    """Test best-score search"""

    def setup_method(self):
        self.solver = PatternSolver()

    def test_empty_hand(self):
        solution = self.solver.solve(TileMultiset())
        assert solution.score == 0
        assert solution.combinations == []

    def test_short_run(self):
        solution = self.solver.solve(hand(red=[1, 2, 3]))
        assert solution.score == 6
        assert solution.combinations[0].kind == CombinationType.SEQUENCE

    def test_triplets(self):
        """Test three- and four-colour groups"""
        assert self.solver.solve(hand(red=[3], black=[3], blue=[3])).score == 9
        assert self.solver.solve(hand(red=[3], black=[3], blue=[3], yellow=[3])).score == 12

    def test_long_run_kept_whole(self):
        solution = self.solver.solve(hand(red=[1, 2, 3, 4, 5]))
        assert solution.score == 15
        assert len(solution.combinations) == 1

    def test_doubled_run(self):
        """Test both copies of a run are used"""
        solution = self.solver.solve(hand(red=[1, 1, 2, 2, 3, 3]))
        assert solution.score == 12
        assert len(solution.combinations) == 2

    def test_triplets_beat_run(self):
        solution = self.solver.solve(hand(red=[1, 2, 3, 4, 5], black=[3, 4], blue=[3, 4]))
        assert solution.score == 21

    def test_triplet_takes_run_tile(self):
        solution = self.solver.solve(hand(red=[2, 3, 4], black=[4], blue=[4]))
        assert solution.score == 12
        assert solution.combinations[0].kind == CombinationType.TRIPLET

    def test_mixed_hand(self):
        """Test a run, a triplet and a second run"""
        pattern = hand(red=[1, 2, 3], black=[4, 4], blue=[4, 7, 8, 9], yellow=[4])
        solution = self.solver.solve(pattern)

        assert solution.score == 42
        assert len(solution.combinations) == 3
        assert_valid_solution(pattern, solution)

    def test_dead_tile_ignored(self):
        pattern = hand(red=[1, 2, 3, 6], black=[4, 4], blue=[4, 7, 8, 9], yellow=[4])
        assert self.solver.solve(pattern).score == 42

    def test_longer_run(self):
        pattern = hand(red=[1, 2, 3], black=[4, 4], blue=[4, 7, 8, 9, 10], yellow=[4])
        assert self.solver.solve(pattern).score == 52

    def test_higher_ranks(self):
        """Test scores use face values after the standard-form shift"""
        pattern = hand(red=[1, 2, 3], black=[5, 5], blue=[5, 8, 9, 10], yellow=[5])
        assert self.solver.solve(pattern).score == 48

    def test_high_run_scored_at_face_value(self):
        solution = self.solver.solve(hand(yellow=[11, 12, 13]))
        assert solution.score == 36
        assert [t.rank for t in solution.combinations[0].tiles] == [11, 12, 13]
        assert all(t.color == YELLOW for t in solution.combinations[0].tiles)

    def test_tetrad_split_frees_run_tile(self):
        """A four-colour group gives up a tile to complete a run"""
        pattern = hand(red=[5, 6, 7], black=[5], blue=[5], yellow=[5])
        solution = self.solver.solve(pattern)

        # black/blue/yellow 5 (15) + red 5-6-7 (18)
        assert solution.score == 33
        assert_valid_solution(pattern, solution)

    def test_input_not_modified(self):
        pattern = hand(red=[1, 2, 3, 9], black=[3], blue=[3])
        before = pattern.fields
        self.solver.solve(pattern)
        assert pattern.fields == before

    def test_idempotent(self):
        """Test repeated solves agree, cached or not"""
        pattern = hand(red=[1, 2, 3, 4, 7, 7], black=[4, 7, 8, 9], blue=[4, 7], yellow=[12, 13])
        first = self.solver.solve(pattern)
        second = self.solver.solve(pattern)
        fresh = PatternSolver().solve(pattern)

        assert first.score == second.score == fresh.score
        assert_valid_solution(pattern, second)

    def test_recolored_hands_score_equally(self):
        pattern = hand(red=[2, 3, 4, 5], black=[5, 6], blue=[5, 6], yellow=[6, 10])
        mapping = {RED: YELLOW, BLACK: BLUE, BLUE: RED, YELLOW: BLACK}
        recolored = TileMultiset()
        for tile in pattern.tiles():
            recolored.add(tile.rank, mapping[tile.color])

        assert self.solver.solve(pattern).score == self.solver.solve(recolored).score

    def test_shifted_hands_cached_separately(self):
        """Same shape at different ranks gives different scores"""
        assert self.solver.solve(hand(red=[1, 2, 3])).score == 6
        assert self.solver.solve(hand(red=[7, 8, 9])).score == 24
        assert self.solver.solve(hand(blue=[7, 8, 9])).score == 24

    def test_random_hands_valid(self):
        """Test solutions on random hands are consistent"""
        rng = np.random.default_rng(3)
        deck = np.repeat(np.arange(52), 2)
        for _ in range(10):
            counts = np.bincount(rng.choice(deck, size=14, replace=False), minlength=52)
            pattern = TileMultiset.from_count_array(counts.reshape(4, 13))
            assert_valid_solution(pattern, self.solver.solve(pattern))


class TestCandidates:
    """Test combination enumeration"""

    def setup_method(self):
        self.solver = PatternSolver()

    def test_all_sub_runs(self):
        sequences = self.solver.find_all_sequences(hand(red=[1, 2, 3, 4]))
        ranges = {(s.tiles[0].rank, s.tiles[-1].rank) for s in sequences}
        assert ranges == {(1, 4), (1, 3), (2, 4)}

    def test_triplets_and_splits(self):
        """Test drop-one variants appear only when useful"""
        pattern = hand(red=[5, 6, 7], black=[5], blue=[5], yellow=[5])
        triplets = self.solver.find_all_triplets(pattern)
        colour_sets = [tuple(t.color for t in trip.tiles) for trip in triplets]

        assert (RED, BLACK, BLUE, YELLOW) in colour_sets
        assert (BLACK, BLUE, YELLOW) in colour_sets
        assert len(colour_sets) == 2

    def test_split_tetrads_disabled(self):
        pattern = hand(red=[5, 6, 7], black=[5], blue=[5], yellow=[5])
        solver = PatternSolver(rules=SolverRules(split_tetrads=False))
        assert len(solver.find_all_triplets(pattern)) == 1


class TestSolverCache:
    """Test solver and cache integration"""

    def test_cache_filled(self):
        solver = PatternSolver()
        solver.solve(hand(red=[1, 2, 3], black=[3], blue=[3]))
        assert len(solver.cache) > 0
        assert solver.cache_stats()

    def test_shared_cache(self):
        """Test two solvers can share one cache"""
        cache = PatternCache(max_size=50)
        PatternSolver(cache=cache).solve(hand(red=[4, 5, 6]))
        cache.reset_stats()
        PatternSolver(cache=cache).solve(hand(blue=[4, 5, 6]))

        assert cache.hit_rate_stats().cache_hits >= 1

    def test_tiny_cache_still_correct(self):
        """Test eviction never changes results"""
        pattern = hand(red=[1, 2, 3, 4, 5], black=[3, 4, 5], blue=[3, 4, 5], yellow=[5])
        expected = PatternSolver().solve(pattern).score
        solver = PatternSolver(cache=PatternCache(max_size=1))
        assert solver.solve(pattern).score == expected

    def test_fast_rules(self):
        solver = PatternSolver(rules=FAST_RULES)
        assert solver.cache.max_size == FAST_RULES.cache_size
        assert solver.solve(hand(red=[1, 2, 3])).score == 6

    def test_rules_tag_cache_keys(self):
        """Test solvers with different rules do not share cache entries"""
        assert DEFAULT_RULES.fingerprint() != FAST_RULES.fingerprint()
        assert SolverRules(name="Renamed").fingerprint() == DEFAULT_RULES.fingerprint()

        shared = PatternCache(max_size=100)
        pattern = hand(red=[5, 6, 7], black=[5], blue=[5], yellow=[5])
        PatternSolver(cache=shared).solve(pattern)
        default_keys = set(shared.stats())

        PatternSolver(cache=shared, rules=FAST_RULES).solve(pattern)
        fast_keys = set(shared.stats()) - default_keys

        assert fast_keys
        assert all(key.startswith(FAST_RULES.fingerprint() + ":") for key in fast_keys)
        assert all(key.startswith(DEFAULT_RULES.fingerprint() + ":") for key in default_keys)

    def test_clear_cache(self):
        solver = PatternSolver()
        solver.solve(hand(red=[1, 2, 3]))
        solver.clear_cache()
        assert len(solver.cache) == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
