"""
Pairs opening

Scores a hand laid down as pairs instead of sequences and triplets.
Every rank/colour held twice is a pair worth twice its rank. Each joker
then pairs up with the highest single tile left.
"""

from typing import List

from .combinations import CombinationType, ScoredCombination, Solution
from .tiles import MAX_RANK, MIN_RANK, MAX_COPIES, Tile, TileColor, TileMultiset


class PairPatternSolver:
    """Best pairs split of a hand, with up to two jokers"""

    def solve_with_joker(self, pattern: TileMultiset, joker_count: int = 0) -> Solution:
        if not 0 <= joker_count <= 2:
            raise ValueError(f"Joker count must be 0, 1 or 2, got {joker_count}")

        combinations = []
        for rank in range(MIN_RANK, MAX_RANK + 1):
            for color in TileColor:
                if pattern.count(rank, color) == MAX_COPIES:
                    combinations.append(self._pair(Tile(rank, color), Tile(rank, color)))

        for tile in self.single_tiles(pattern)[:joker_count]:
            combinations.append(self._pair(tile, Tile(tile.rank, tile.color, is_joker=True)))

        return Solution(sum(c.score for c in combinations), combinations)

    @staticmethod
    def single_tiles(pattern: TileMultiset) -> List[Tile]:
        """Tiles held exactly once, highest rank first"""
        singles = [
            Tile(rank, color)
            for rank in range(MIN_RANK, MAX_RANK + 1)
            for color in TileColor
            if pattern.count(rank, color) == 1
        ]
        return sorted(singles, key=lambda t: t.rank, reverse=True)

    @staticmethod
    def _pair(first: Tile, second: Tile) -> ScoredCombination:
        return ScoredCombination(CombinationType.PAIR, (first, second), first.rank * 2)
