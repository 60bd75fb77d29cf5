"""
Hand preprocessing

Drops tiles that can never score and splits a hand into independent
connected components.
"""

from typing import List, Set, Tuple

from .tiles import MAX_RANK, MIN_RANK, Tile, TileColor, TileMultiset


def preprocess(pattern: TileMultiset) -> TileMultiset:
    """
    Remove tiles that cannot be part of any sequence or triplet.

    A cell survives if its rank has tiles in at least three colours, or if
    it lies inside a same-colour run of length 3 or more. Every copy of a
    dead cell is removed. The input is not modified.
    """
    result = pattern.clone()
    useful: Set[Tuple[int, TileColor]] = set()

    for rank in range(MIN_RANK, MAX_RANK + 1):
        if result.can_form_triplet(rank):
            for color in result.colors_present_at_rank(rank):
                useful.add((rank, color))

    for color in TileColor:
        for start, end in result.maximal_runs(color):
            if end - start + 1 >= 3:
                for rank in range(start, end + 1):
                    useful.add((rank, color))

    for rank in range(MIN_RANK, MAX_RANK + 1):
        for color in TileColor:
            count = result.count(rank, color)
            if count and (rank, color) not in useful:
                result.remove(rank, color, count)

    return result


def removed_tiles(original: TileMultiset, processed: TileMultiset) -> List[Tile]:
    """List the tiles present in `original` but missing from `processed`"""
    removed = []
    for rank in range(MIN_RANK, MAX_RANK + 1):
        for color in TileColor:
            missing = original.count(rank, color) - processed.count(rank, color)
            removed.extend(Tile(rank, color) for _ in range(max(missing, 0)))
    return removed


def split_by_connectivity(pattern: TileMultiset) -> List[TileMultiset]:
    """
    Split a hand into connected components.

    Two occupied cells are connected when they share a rank (different
    colours) or share a colour at adjacent ranks. No combination can span
    two components, so each one can be solved on its own.
    """
    visited: Set[Tuple[int, TileColor]] = set()
    components: List[TileMultiset] = []

    for rank in range(MIN_RANK, MAX_RANK + 1):
        for color in TileColor:
            if pattern.count(rank, color) == 0 or (rank, color) in visited:
                continue

            component = TileMultiset()
            stack = [(rank, color)]
            visited.add((rank, color))
            while stack:
                r, c = stack.pop()
                component.add(r, c, pattern.count(r, c))

                neighbours = [(r, other) for other in TileColor if other != c]
                if r > MIN_RANK:
                    neighbours.append((r - 1, c))
                if r < MAX_RANK:
                    neighbours.append((r + 1, c))

                for cell in neighbours:
                    if cell not in visited and pattern.count(*cell) > 0:
                        visited.add(cell)
                        stack.append(cell)

            components.append(component)

    return components
