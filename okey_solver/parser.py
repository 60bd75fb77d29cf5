"""
Hand serialization

Converts hands to and from a small JSON format:

    {"name": "example", "tiles": {"red": [3, 3, 4, 5], "black": [4],
                                  "blue": [], "yellow": []}}

Each colour lists its ranks, repeated once per copy held.
"""

import json
from collections import Counter
from typing import Any, Dict, Sequence

from .tiles import MAX_RANK, MIN_RANK, TileColor, TileMultiset


class PatternFormatError(ValueError):
    """Raised when hand data does not have the expected shape"""


COLOR_NAMES = {color.name.lower(): color for color in TileColor}


class PatternParser:
    """Reads and writes hands in the colour-keyed JSON format"""

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> TileMultiset:
        """
        Build a hand from its dict form.

        Missing colours are treated as empty.

        Raises:
            PatternFormatError: missing "tiles", unknown colour, non-integer rank
            RankOutOfRangeError: rank outside 1-13
            CountOutOfRangeError: more than two copies of a tile
        """
        if not isinstance(data, dict):
            raise PatternFormatError(f"Hand must be an object, got {type(data).__name__}")
        tiles = data.get("tiles")
        if not isinstance(tiles, dict):
            raise PatternFormatError("Invalid hand: missing tiles object")

        pattern = TileMultiset()
        for color_name, ranks in tiles.items():
            color = COLOR_NAMES.get(color_name)
            if color is None:
                raise PatternFormatError(f"Invalid colour: {color_name}")
            PatternParser._add_ranks(pattern, color, ranks)
        return pattern

    @staticmethod
    def from_rank_lists(
        red: Sequence[int] = (),
        black: Sequence[int] = (),
        blue: Sequence[int] = (),
        yellow: Sequence[int] = (),
    ) -> TileMultiset:
        """Build a hand from one rank list per colour"""
        pattern = TileMultiset()
        for color, ranks in zip(TileColor, (red, black, blue, yellow)):
            PatternParser._add_ranks(pattern, color, ranks)
        return pattern

    @staticmethod
    def _add_ranks(pattern: TileMultiset, color: TileColor, ranks: Sequence[int]) -> None:
        if not isinstance(ranks, (list, tuple)):
            raise PatternFormatError(f"Ranks for {color.name.lower()} must be a list")
        for rank in ranks:
            # bool is an int subclass but never a rank
            if isinstance(rank, bool) or not isinstance(rank, int):
                raise PatternFormatError(f"Invalid rank: {rank!r}")

        for rank, count in sorted(Counter(ranks).items()):
            pattern.add(rank, color, count)

    @staticmethod
    def to_dict(pattern: TileMultiset, name: str = "") -> Dict[str, Any]:
        """Convert a hand to its dict form, ranks ascending"""
        return {
            "name": name,
            "tiles": {
                color_name: [
                    rank
                    for rank in range(MIN_RANK, MAX_RANK + 1)
                    for _ in range(pattern.count(rank, color))
                ]
                for color_name, color in COLOR_NAMES.items()
            },
        }

    @staticmethod
    def from_json(text: str) -> TileMultiset:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise PatternFormatError(f"Invalid JSON: {e}") from e
        return PatternParser.from_dict(data)

    @staticmethod
    def to_json(pattern: TileMultiset, name: str = "") -> str:
        return json.dumps(PatternParser.to_dict(pattern, name))
