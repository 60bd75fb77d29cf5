"""
Hand normalisation

Two reversible transforms that let structurally identical hands share
work:

- StandardForm shifts ranks so the lowest occupied rank becomes 1 and
  relabels colours by descending tile count. The solvers search in this
  frame.
- CanonicalForm rotates ranks cyclically and sorts the colour fields so
  that every rotation/recolouring of a hand maps to one representative.
  Its id keys the solution cache.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from .combinations import Combination, ScoredCombination, Solution
from .tiles import (
    FIELD_MASK, MAX_RANK, MIN_RANK, NUM_COLORS, NUM_RANKS, RANK_BITS,
    Tile, TileColor, TileMultiset,
)


AnyCombination = Union[Combination, ScoredCombination]


def _map_combination(combination: AnyCombination, tiles: Sequence[Tile]) -> AnyCombination:
    if isinstance(combination, ScoredCombination):
        return ScoredCombination(combination.kind, tuple(tiles), combination.score)
    return Combination(combination.kind, tuple(tiles))


def _min_rank(pattern: TileMultiset) -> int:
    for rank in range(MIN_RANK, MAX_RANK + 1):
        if pattern.colors_present_at_rank(rank):
            return rank
    return MIN_RANK


@dataclass
class StandardForm:
    """
    A hand shifted and recoloured into standard coordinates.

    Attributes:
        pattern: The transformed hand
        number_offset: Amount subtracted from every rank
        color_mapping: original colour -> standard colour
        inverse_color_mapping: standard colour -> original colour
    """
    pattern: TileMultiset
    number_offset: int
    color_mapping: Tuple[int, ...]
    inverse_color_mapping: Tuple[int, ...]

    @classmethod
    def from_pattern(cls, pattern: TileMultiset) -> 'StandardForm':
        """Standardize a hand: lowest rank becomes 1, busiest colour becomes 0"""
        return cls._build(pattern, _min_rank(pattern) - 1)

    @classmethod
    def from_pattern_for_joker(cls, pattern: TileMultiset) -> 'StandardForm':
        """
        Standardize a hand that will be searched with jokers.

        Hands holding a 12 or 13 keep offset 0 so jokers extending a run
        past the top of the board stay within ranks 1-13.
        """
        has_high = any(
            pattern.colors_present_at_rank(rank) for rank in (MAX_RANK - 1, MAX_RANK)
        )
        offset = 0 if has_high else _min_rank(pattern) - 1
        return cls._build(pattern, offset)

    @classmethod
    def _build(cls, pattern: TileMultiset, offset: int) -> 'StandardForm':
        usage = [pattern.color_total(color) for color in TileColor]
        # busiest colour first, ties keep index order
        order = sorted(range(NUM_COLORS), key=lambda c: (-usage[c], c))

        color_mapping = [0] * NUM_COLORS
        for standard, original in enumerate(order):
            color_mapping[original] = standard

        standard_pattern = TileMultiset()
        for rank in range(MIN_RANK, MAX_RANK + 1):
            for color in TileColor:
                count = pattern.count(rank, color)
                if count:
                    standard_pattern.add(rank - offset, TileColor(color_mapping[color]), count)

        return cls(standard_pattern, offset, tuple(color_mapping), tuple(order))

    def standardize_tile(self, tile: Tile) -> Tile:
        """Map a tile from original into standard coordinates"""
        return Tile(
            tile.rank - self.number_offset,
            TileColor(self.color_mapping[tile.color]),
            tile.is_joker,
        )

    def restore_tile(self, tile: Tile) -> Tile:
        """Map a tile from standard back into original coordinates"""
        return Tile(
            tile.rank + self.number_offset,
            TileColor(self.inverse_color_mapping[tile.color]),
            tile.is_joker,
        )

    def restore_combination(self, combination: AnyCombination) -> AnyCombination:
        return _map_combination(combination, [self.restore_tile(t) for t in combination.tiles])

    def restore_solution(self, solution: Solution) -> Solution:
        return Solution(
            solution.score,
            [self.restore_combination(c) for c in solution.combinations],
        )

    def standardize_solution(self, solution: Solution) -> Solution:
        return Solution(
            solution.score,
            [
                _map_combination(c, [self.standardize_tile(t) for t in c.tiles])
                for c in solution.combinations
            ],
        )

    def __str__(self) -> str:
        return f"StandardForm(offset={self.number_offset}, pattern={self.pattern})"


def _rotate_field(value: int, rotation: int) -> int:
    """Move every rank down by `rotation` places, wrapping 1 round to 13"""
    shift = rotation * RANK_BITS
    return ((value >> shift) | (value << (NUM_RANKS * RANK_BITS - shift))) & FIELD_MASK


@dataclass(frozen=True)
class CanonicalForm:
    """
    Rotation and colour-permutation invariant representative of a hand.

    Attributes:
        fields: Rotated colour fields sorted ascending
        rotation: Ranks were moved down by this many places (mod 13)
        color_order: Canonical slot i holds original colour color_order[i]
    """
    fields: Tuple[int, ...]
    rotation: int
    color_order: Tuple[int, ...]

    @classmethod
    def from_pattern(cls, pattern: TileMultiset) -> 'CanonicalForm':
        """Pick the rotation whose sorted fields are lexicographically smallest"""
        raw = pattern.fields
        best = None
        for rotation in range(NUM_RANKS):
            rotated = [_rotate_field(value, rotation) for value in raw]
            order = sorted(range(NUM_COLORS), key=lambda c: (rotated[c], c))
            fields = tuple(rotated[c] for c in order)
            if best is None or fields < best.fields:
                best = cls(fields, rotation, tuple(order))
        return best

    @property
    def id(self) -> str:
        """Cache key shared by all rotations/recolourings of a hand"""
        return "-".join(f"{value:07x}" for value in self.fields)

    @property
    def pattern(self) -> TileMultiset:
        return TileMultiset.from_fields(self.fields)

    def canonicalize_tile(self, tile: Tile) -> Tile:
        """
        Relabel a tile's colour into canonical slots.

        Ranks are left in place: cache keys carry the rotation, so hands
        sharing a key differ only by colour.
        """
        return Tile(tile.rank, TileColor(self.color_order.index(tile.color)), tile.is_joker)

    def restore_tile(self, tile: Tile) -> Tile:
        return Tile(tile.rank, TileColor(self.color_order[tile.color]), tile.is_joker)

    def key(self, offset: int = 0) -> str:
        """
        Cache key for a hand searched at a given rank offset.

        The canonical id alone merges rotated hands, which score
        differently, so the rotation and offset are appended.
        """
        return f"{self.id}@{self.rotation}+{offset}"

    def canonicalize_solution(self, solution: Solution) -> Solution:
        return Solution(
            solution.score,
            [
                _map_combination(c, [self.canonicalize_tile(t) for t in c.tiles])
                for c in solution.combinations
            ],
        )

    def restore_solution(self, solution: Solution) -> Solution:
        return Solution(
            solution.score,
            [
                _map_combination(c, [self.restore_tile(t) for t in c.tiles])
                for c in solution.combinations
            ],
        )


def canonical_id(pattern: TileMultiset) -> str:
    """Canonical id of a hand"""
    return CanonicalForm.from_pattern(pattern).id


def is_isomorphic(first: TileMultiset, second: TileMultiset) -> bool:
    """Check if two hands are rank rotations / colour permutations of each other"""
    return canonical_id(first) == canonical_id(second)
