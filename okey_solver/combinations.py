"""
Okey Combinations

Sequences, triplets and pairs, plus the scored solutions the solvers
return.
"""

from enum import IntEnum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

from .tiles import Tile, TileColor


class CombinationType(IntEnum):
    """Types of combinations a hand can be split into"""
    SEQUENCE = 0  # 3+ consecutive ranks, one colour
    TRIPLET = 1   # 3-4 tiles of one rank, distinct colours
    PAIR = 2      # 2 identical tiles (pairs opening only)


@dataclass(frozen=True)
class Combination:
    """
    A group of tiles laid down together.

    Attributes:
        kind: Sequence, triplet or pair
        tiles: Tiles in the combination, jokers included
    """
    kind: CombinationType
    tiles: tuple

    def __post_init__(self):
        """Validate combination"""
        object.__setattr__(self, "tiles", tuple(self.tiles))
        if self.kind == CombinationType.SEQUENCE:
            if len(self.tiles) < 3:
                raise ValueError("Sequence must have at least 3 tiles")
            if not all(t.color == self.tiles[0].color for t in self.tiles):
                raise ValueError("Sequence tiles must share one colour")
            ranks = sorted(t.rank for t in self.tiles)
            if any(b != a + 1 for a, b in zip(ranks, ranks[1:])):
                raise ValueError(f"Sequence ranks must be consecutive, got {ranks}")
        elif self.kind == CombinationType.TRIPLET:
            if not 3 <= len(self.tiles) <= 4:
                raise ValueError("Triplet must have 3 or 4 tiles")
            if not all(t.rank == self.tiles[0].rank for t in self.tiles):
                raise ValueError("Triplet tiles must share one rank")
            if len({t.color for t in self.tiles}) != len(self.tiles):
                raise ValueError("Triplet tiles must have distinct colours")
        elif self.kind == CombinationType.PAIR:
            if len(self.tiles) != 2:
                raise ValueError("Pair must have exactly 2 tiles")
            first, second = self.tiles
            if (first.rank, first.color) != (second.rank, second.color):
                raise ValueError("Pair tiles must be identical")

    @property
    def joker_count(self) -> int:
        return sum(1 for t in self.tiles if t.is_joker)

    def __str__(self) -> str:
        tiles_str = " ".join(str(t) for t in self.tiles)
        return f"[{self.kind.name}: {tiles_str}]"


@dataclass(frozen=True)
class ScoredCombination(Combination):
    """A combination together with the points it earns"""
    score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.name.lower(),
            "score": self.score,
            "tiles": [
                {"number": t.rank, "color": int(t.color), "isJoker": t.is_joker}
                for t in self.tiles
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScoredCombination':
        tiles = tuple(
            Tile(int(t["number"]), TileColor(int(t["color"])), bool(t.get("isJoker", False)))
            for t in data["tiles"]
        )
        return cls(CombinationType[data["type"].upper()], tiles, int(data["score"]))


def combination_score(tiles: Iterable[Tile], offset: int = 0) -> int:
    """
    Points for a group of tiles: the sum of their ranks.

    A joker counts as the rank it stands in for. `offset` converts ranks
    from a shifted coordinate frame back to face values.
    """
    return sum(t.rank + offset for t in tiles)


@dataclass
class Solution:
    """
    Best split of a hand into combinations.

    Tiles not used by any combination are discarded and earn nothing.
    """
    score: int = 0
    combinations: List[ScoredCombination] = field(default_factory=list)

    @property
    def tile_count(self) -> int:
        """Number of tiles covered by the combinations"""
        return sum(len(c.tiles) for c in self.combinations)

    @classmethod
    def merge(cls, solutions: Sequence['Solution']) -> 'Solution':
        """Combine the solutions of independent components"""
        return cls(
            score=sum(s.score for s in solutions),
            combinations=[c for s in solutions for c in s.combinations],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "combinations": [c.to_dict() for c in self.combinations],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Solution':
        """
        Rebuild a solution from its dict form.

        Raises:
            ValueError: if the data does not have the expected shape
        """
        try:
            combinations = [ScoredCombination.from_dict(c) for c in data["combinations"]]
            return cls(score=int(data["score"]), combinations=combinations)
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed solution data: {e}") from e

    def __str__(self) -> str:
        combos = " ".join(str(c) for c in self.combinations)
        return f"Solution(score={self.score}) {combos}".rstrip()
