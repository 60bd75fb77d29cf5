"""
Okey Tiles System

Defines the numbered, coloured tiles used in Okey 101 / Rummikub style games:
- 13 ranks (1-13)
- 4 colours (Red, Black, Blue, Yellow)
- at most 2 physical copies of each rank/colour pair

A hand is stored as a TileMultiset: one 26-bit field per colour holding
13 two-bit counters.
"""

from enum import IntEnum
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple
import numpy as np


MIN_RANK = 1
MAX_RANK = 13
NUM_RANKS = 13
NUM_COLORS = 4
MAX_COPIES = 2

# 2 bits per rank
RANK_BITS = 2
FIELD_MASK = (1 << (RANK_BITS * NUM_RANKS)) - 1


class RankOutOfRangeError(ValueError):
    """Raised when a rank is outside 1-13"""


class CountOutOfRangeError(ValueError):
    """Raised when an add would leave more than two copies of a tile"""


class TileColor(IntEnum):
    """Tile colours"""
    RED = 0
    BLACK = 1
    BLUE = 2
    YELLOW = 3


@dataclass(frozen=True)
class Tile:
    """
    Represents a single tile, or a joker standing in for one.

    Attributes:
        rank: Face value of the tile (1-13)
        color: Colour of the tile
        is_joker: True when a joker is placed here as this rank/colour
    """
    rank: int
    color: TileColor
    is_joker: bool = False

    def __post_init__(self):
        """Validate tile values"""
        if not MIN_RANK <= self.rank <= MAX_RANK:
            raise RankOutOfRangeError(f"Rank must be between 1 and 13, got {self.rank}")
        if not isinstance(self.color, TileColor):
            object.__setattr__(self, "color", TileColor(self.color))

    def __lt__(self, other) -> bool:
        """Comparison for sorting"""
        if not isinstance(other, Tile):
            return NotImplemented
        return (self.color, self.rank, self.is_joker) < (other.color, other.rank, other.is_joker)

    def __repr__(self) -> str:
        joker = ", joker" if self.is_joker else ""
        return f"Tile({self.rank}, {self.color.name}{joker})"

    def __str__(self) -> str:
        """Human-readable string representation"""
        suffix = "*" if self.is_joker else ""
        return f"{self.color.name.lower()}{self.rank}{suffix}"


def _check_rank(rank: int) -> None:
    if not MIN_RANK <= rank <= MAX_RANK:
        raise RankOutOfRangeError(f"Rank must be between 1 and 13, got {rank}")


class TileMultiset:
    """
    A hand of tiles stored as four bit-packed colour fields.

    Each field holds 13 two-bit counters, one per rank, so a rank/colour
    cell counts 0, 1 or 2 tiles. Mutating methods work in place; the
    solvers always clone before removing tiles.
    """

    def __init__(self, fields: Optional[Sequence[int]] = None):
        """Initialize an empty multiset, or one built from raw colour fields"""
        self._fields: List[int] = [0] * NUM_COLORS
        if fields is not None:
            self._set_fields(fields)

    def _set_fields(self, fields: Sequence[int]) -> None:
        if len(fields) != NUM_COLORS:
            raise ValueError(f"Expected {NUM_COLORS} colour fields, got {len(fields)}")
        for color, value in enumerate(fields):
            if value < 0 or value > FIELD_MASK:
                raise ValueError(f"Colour field out of range: {value}")
            for rank in range(MIN_RANK, MAX_RANK + 1):
                if (value >> ((rank - 1) * RANK_BITS)) & 0b11 > MAX_COPIES:
                    raise CountOutOfRangeError(
                        f"Count for rank {rank} colour {TileColor(color).name} exceeds {MAX_COPIES}"
                    )
        self._fields = list(fields)

    @classmethod
    def from_fields(cls, fields: Sequence[int]) -> 'TileMultiset':
        """Create a multiset from four raw colour fields"""
        return cls(fields)

    @classmethod
    def from_tiles(cls, tiles: Sequence[Tile]) -> 'TileMultiset':
        """Create a multiset from a list of (non-joker) tiles"""
        pattern = cls()
        for tile in tiles:
            pattern.add(tile.rank, tile.color)
        return pattern

    @classmethod
    def from_count_array(cls, counts: np.ndarray) -> 'TileMultiset':
        """Create a multiset from a (4, 13) count array"""
        counts = np.asarray(counts)
        if counts.shape != (NUM_COLORS, NUM_RANKS):
            raise ValueError(f"Count array must have shape (4, 13), got {counts.shape}")
        pattern = cls()
        for color in range(NUM_COLORS):
            for rank in range(MIN_RANK, MAX_RANK + 1):
                count = int(counts[color, rank - 1])
                if count:
                    pattern.add(rank, TileColor(color), count)
        return pattern

    @property
    def fields(self) -> Tuple[int, ...]:
        """The four raw colour fields"""
        return tuple(self._fields)

    def count(self, rank: int, color: TileColor) -> int:
        """Number of copies of a rank/colour (0-2)"""
        _check_rank(rank)
        return (self._fields[color] >> ((rank - 1) * RANK_BITS)) & 0b11

    def add(self, rank: int, color: TileColor, count: int = 1) -> None:
        """
        Add copies of a tile.

        Raises:
            RankOutOfRangeError: rank outside 1-13
            CountOutOfRangeError: count not 1-2, or the cell would exceed 2 copies
        """
        _check_rank(rank)
        if not 1 <= count <= MAX_COPIES:
            raise CountOutOfRangeError(f"Count must be between 1 and 2, got {count}")
        current = self.count(rank, color)
        if current + count > MAX_COPIES:
            raise CountOutOfRangeError(
                f"Cannot add {count} x {TileColor(color).name} {rank}: already holding {current}"
            )
        self._write(rank, color, current + count)

    def remove(self, rank: int, color: TileColor, count: int = 1) -> bool:
        """
        Remove copies of a tile.
        Returns True if removed, False if fewer than `count` copies are present.
        """
        current = self.count(rank, color)
        if count < 1 or current < count:
            return False
        self._write(rank, color, current - count)
        return True

    def _write(self, rank: int, color: TileColor, value: int) -> None:
        pos = (rank - 1) * RANK_BITS
        self._fields[color] = (self._fields[color] & ~(0b11 << pos)) | (value << pos)

    def clear(self) -> None:
        """Remove every tile"""
        self._fields = [0] * NUM_COLORS

    def clone(self) -> 'TileMultiset':
        """Create an independent copy"""
        copy = TileMultiset()
        copy._fields = list(self._fields)
        return copy

    def total_count(self) -> int:
        """Total number of tiles"""
        return sum(self.color_total(color) for color in TileColor)

    def color_total(self, color: TileColor) -> int:
        """Number of tiles of one colour"""
        value = self._fields[color]
        total = 0
        while value:
            total += value & 0b11
            value >>= RANK_BITS
        return total

    def is_empty(self) -> bool:
        return not any(self._fields)

    def colors_present_at_rank(self, rank: int) -> List[TileColor]:
        """Colours holding at least one tile of this rank, ascending"""
        return [color for color in TileColor if self.count(rank, color) > 0]

    def can_form_triplet(self, rank: int) -> bool:
        """Check if at least three colours are present at this rank"""
        return len(self.colors_present_at_rank(rank)) >= 3

    def maximal_runs(self, color: TileColor) -> List[Tuple[int, int]]:
        """
        Find the maximal runs of occupied ranks for one colour.

        Returns:
            Inclusive (start, end) rank ranges; single tiles give (r, r).
            Runs never wrap from 13 to 1.
        """
        runs = []
        start = None
        for rank in range(MIN_RANK, MAX_RANK + 1):
            if self.count(rank, color) > 0:
                if start is None:
                    start = rank
            elif start is not None:
                runs.append((start, rank - 1))
                start = None
        if start is not None:
            runs.append((start, MAX_RANK))
        return runs

    def run_length(self, rank: int, color: TileColor) -> int:
        """Length of the same-colour run containing this cell (0 if empty)"""
        if self.count(rank, color) == 0:
            return 0
        low = rank
        while low > MIN_RANK and self.count(low - 1, color) > 0:
            low -= 1
        high = rank
        while high < MAX_RANK and self.count(high + 1, color) > 0:
            high += 1
        return high - low + 1

    def connectivity(self, rank: int, color: TileColor) -> int:
        """
        How useful a cell is toward forming a combination.

        The larger of the run length through the cell and the number of
        colours at this rank when that number is at least 3.
        """
        colors = len(self.colors_present_at_rank(rank))
        return max(self.run_length(rank, color), colors if colors >= 3 else 0)

    def tiles(self) -> Iterator[Tile]:
        """Iterate over every tile, rank-major then colour, with multiplicity"""
        for rank in range(MIN_RANK, MAX_RANK + 1):
            for color in TileColor:
                for _ in range(self.count(rank, color)):
                    yield Tile(rank, color)

    def to_count_array(self) -> np.ndarray:
        """
        Convert to a (4, 13) array counting each colour/rank.
        Row = colour, column = rank - 1.
        """
        counts = np.zeros((NUM_COLORS, NUM_RANKS), dtype=np.int8)
        for color in TileColor:
            for rank in range(MIN_RANK, MAX_RANK + 1):
                counts[color, rank - 1] = self.count(rank, color)
        return counts

    def __eq__(self, other) -> bool:
        if not isinstance(other, TileMultiset):
            return NotImplemented
        return self._fields == other._fields

    __hash__ = None

    def __len__(self) -> int:
        return self.total_count()

    def __repr__(self) -> str:
        return f"TileMultiset({self.total_count()} tiles)"

    def __str__(self) -> str:
        """Readable form, e.g. 'RED: 3x2, 4x1'"""
        lines = []
        for color in TileColor:
            cells = [
                f"{rank}x{self.count(rank, color)}"
                for rank in range(MIN_RANK, MAX_RANK + 1)
                if self.count(rank, color) > 0
            ]
            if cells:
                lines.append(f"{color.name}: {', '.join(cells)}")
        return "\n".join(lines)
