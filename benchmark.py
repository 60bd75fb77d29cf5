#!/usr/bin/env python3
"""
Benchmark for the Okey hand solver

Two modes:
1. Scenario check - solve predefined hands and compare with known scores
2. Random hands - solve random 21-tile hands and report timing and cache use

Usage:
    python benchmark.py --check
    python benchmark.py --count 200 --jokers 1 --seed 7
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List
from dataclasses import dataclass, field

import numpy as np

sys.path.insert(0, str(Path(__file__).parent))

from okey_solver import (
    FAST_RULES, DEFAULT_RULES, JokerPatternSolver, JsonFileStore, PatternCache,
    PatternParser, TileMultiset,
)
from okey_solver.tiles import NUM_COLORS, NUM_RANKS, MAX_COPIES


HAND_SIZE = 21


@dataclass
class Scenario:
    """A hand with a known best score."""
    name: str
    description: str
    tiles: Dict[str, List[int]]
    expected_score: int
    jokers: int = 0


SCENARIOS = [
    Scenario(
        name="Empty hand",
        description="Nothing to lay down.",
        tiles={},
        expected_score=0,
    ),
    Scenario(
        name="Short run",
        description="Red 1-2-3.",
        tiles={"red": [1, 2, 3]},
        expected_score=6,
    ),
    Scenario(
        name="Three-colour triplet",
        description="A 3 in red, black and blue.",
        tiles={"red": [3], "black": [3], "blue": [3]},
        expected_score=9,
    ),
    Scenario(
        name="Four-colour triplet",
        description="A 3 in every colour.",
        tiles={"red": [3], "black": [3], "blue": [3], "yellow": [3]},
        expected_score=12,
    ),
    Scenario(
        name="Long run",
        description="Red 1-5 as one sequence.",
        tiles={"red": [1, 2, 3, 4, 5]},
        expected_score=15,
    ),
    Scenario(
        name="Doubled run",
        description="Two copies of red 1-2-3.",
        tiles={"red": [1, 1, 2, 2, 3, 3]},
        expected_score=12,
    ),
    Scenario(
        name="Run versus triplets",
        description="Red 1-5 crossing 3s and 4s in black and blue.",
        tiles={"red": [1, 2, 3, 4, 5], "black": [3, 4], "blue": [3, 4]},
        expected_score=21,
    ),
    Scenario(
        name="Triplet steals from run",
        description="Red 2-3-4 against a 4 in black and blue.",
        tiles={"red": [2, 3, 4], "black": [4], "blue": [4]},
        expected_score=12,
    ),
    Scenario(
        name="Mixed hand",
        description="Run, four-colour 4s and a blue run.",
        tiles={"red": [1, 2, 3], "black": [4, 4], "blue": [4, 7, 8, 9], "yellow": [4]},
        expected_score=42,
    ),
    Scenario(
        name="Mixed hand with dead tile",
        description="As above plus a useless red 6.",
        tiles={"red": [1, 2, 3, 6], "black": [4, 4], "blue": [4, 7, 8, 9], "yellow": [4]},
        expected_score=42,
    ),
    Scenario(
        name="Mixed hand, longer run",
        description="Blue run extended to 10.",
        tiles={"red": [1, 2, 3], "black": [4, 4], "blue": [4, 7, 8, 9, 10], "yellow": [4]},
        expected_score=52,
    ),
    Scenario(
        name="Mixed hand, higher ranks",
        description="Four-colour 5s and blue 8-10.",
        tiles={"red": [1, 2, 3], "black": [5, 5], "blue": [5, 8, 9, 10], "yellow": [5]},
        expected_score=48,
    ),
    Scenario(
        name="Joker extends run",
        description="Red 2-3 plus a joker as red 4.",
        tiles={"red": [2, 3]},
        expected_score=9,
        jokers=1,
    ),
]


def random_hand(rng: np.random.Generator, size: int = HAND_SIZE) -> TileMultiset:
    """Draw `size` tiles from a full two-copy deck without jokers."""
    deck = np.repeat(np.arange(NUM_COLORS * NUM_RANKS), MAX_COPIES)
    drawn = rng.choice(deck, size=size, replace=False)
    counts = np.bincount(drawn, minlength=NUM_COLORS * NUM_RANKS)
    return TileMultiset.from_count_array(counts.reshape(NUM_COLORS, NUM_RANKS))


class BenchmarkRunner:
    """Run solver benchmarks."""

    def __init__(self, solver: JokerPatternSolver, verbose: bool = False):
        self.solver = solver
        self.verbose = verbose
        self.results: List[Dict] = []

    def run_scenario(self, scenario: Scenario) -> Dict:
        """Solve one scenario and compare with its expected score."""
        pattern = PatternParser.from_dict({"tiles": scenario.tiles})
        solution = self.solver.solve_with_joker(pattern, scenario.jokers)

        result = {
            "name": scenario.name,
            "score": solution.score,
            "expected": scenario.expected_score,
            "passed": solution.score == scenario.expected_score,
            "solution": solution,
        }
        self.results.append(result)
        return result

    def run_scenarios(self) -> bool:
        """Run all scenarios; True when every one scores as expected."""
        print("\n" + "=" * 70)
        print("OKEY SOLVER SCENARIOS")
        print("=" * 70 + "\n")

        for scenario in SCENARIOS:
            result = self.run_scenario(scenario)
            status = "PASS" if result["passed"] else "FAIL"
            print(f"{status} {scenario.name}")
            print(f"   Score:    {result['score']}")
            print(f"   Expected: {result['expected']}")
            if self.verbose or not result["passed"]:
                print(f"   {scenario.description}")
                print(f"   {result['solution']}")
            print()

        passed = sum(1 for r in self.results if r["passed"])
        print("=" * 70)
        print(f"Passed: {passed}/{len(SCENARIOS)}")
        print("=" * 70)
        return passed == len(SCENARIOS)

    def run_random(self, count: int, jokers: int, seed: int) -> None:
        """Solve `count` random hands and print timing statistics."""
        rng = np.random.default_rng(seed)
        hands = [random_hand(rng) for _ in range(count)]
        self.solver.cache.reset_stats()

        durations = np.zeros(count)
        scores = np.zeros(count, dtype=np.int32)
        for i, hand in enumerate(hands):
            start = time.perf_counter()
            solution = self.solver.solve_with_joker(hand, jokers)
            durations[i] = time.perf_counter() - start
            scores[i] = solution.score
            if self.verbose:
                print(f"#{i + 1}: score {solution.score} in {durations[i] * 1000:.1f} ms")

        stats = self.solver.cache.hit_rate_stats()

        print("\n" + "=" * 70)
        print(f"RANDOM HANDS ({count} x {HAND_SIZE} tiles, {jokers} joker(s), seed {seed})")
        print("=" * 70)
        print(f"Total time:   {durations.sum():.2f} s")
        print(f"Mean time:    {durations.mean() * 1000:.1f} ms")
        print(f"Slowest hand: {durations.max() * 1000:.1f} ms")
        print(f"Mean score:   {scores.mean():.1f}")
        print(f"Best score:   {scores.max()}")
        print(f"Cache size:   {len(self.solver.cache)}/{self.solver.cache.max_size}")
        print(f"Hit rate:     {stats.hit_rate * 100:.1f}% of {stats.total_requests} lookups")
        print("=" * 70)


def main():
    parser = argparse.ArgumentParser(description="Benchmark the Okey hand solver")
    parser.add_argument("--check", action="store_true", help="Run the scenario table")
    parser.add_argument("--count", type=int, default=100, help="Number of random hands")
    parser.add_argument("--jokers", type=int, default=0, choices=[0, 1, 2])
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--fast", action="store_true", help="Use the fast rule set")
    parser.add_argument("--cache-file", type=str, default=None,
                        help="Persist solutions to this JSON file")
    parser.add_argument("--verbose", action="store_true")

    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s")

    rules = FAST_RULES if args.fast else DEFAULT_RULES
    store = JsonFileStore(args.cache_file) if args.cache_file else None
    solver = JokerPatternSolver(PatternCache(rules.cache_size, store=store), rules)
    runner = BenchmarkRunner(solver, verbose=args.verbose)

    print(f"Rules: {rules}")

    ok = True
    if args.check:
        ok = runner.run_scenarios()
    else:
        runner.run_random(args.count, args.jokers, args.seed)

    if store is not None:
        store.save()

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
