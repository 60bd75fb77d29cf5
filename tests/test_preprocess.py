"""
Tests for hand preprocessing and component splitting
"""

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from okey_solver.tiles import Tile, TileColor, TileMultiset
from okey_solver.preprocess import preprocess, removed_tiles, split_by_connectivity
from okey_solver.parser import PatternParser

RED, BLACK, BLUE, YELLOW = TileColor.RED, TileColor.BLACK, TileColor.BLUE, TileColor.YELLOW
hand = PatternParser.from_rank_lists


class TestPreprocess:
    """Test removal of tiles that can never score"""

    def test_isolated_tiles_removed(self):
        pattern = hand(red=[1, 5, 9], black=[12])
        assert preprocess(pattern).is_empty()

    def test_runs_kept(self):
        """Test tiles in runs of 3+ survive"""
        pattern = hand(red=[1, 2, 3, 7, 8])
        result = preprocess(pattern)

        assert result == hand(red=[1, 2, 3])

    def test_triplet_ranks_kept(self):
        pattern = hand(red=[6], black=[6], yellow=[6], blue=[2])
        result = preprocess(pattern)

        assert result == hand(red=[6], black=[6], yellow=[6])

    def test_all_copies_of_dead_cell_removed(self):
        """Both copies of a useless tile go"""
        pattern = hand(red=[1, 2, 3, 11, 11])
        result = preprocess(pattern)

        assert result.count(11, RED) == 0
        assert result.total_count() == 3

    def test_input_not_modified(self):
        pattern = hand(red=[1, 5, 9])
        preprocess(pattern)
        assert pattern.total_count() == 3

    def test_idempotent(self):
        pattern = hand(red=[1, 2, 3, 6], black=[4, 4, 9], blue=[4, 7, 8, 9], yellow=[4, 12])
        once = preprocess(pattern)
        assert preprocess(once) == once

    def test_removed_tiles(self):
        """Test the report of dropped tiles"""
        pattern = hand(red=[1, 2, 3, 6, 6], black=[11])
        removed = removed_tiles(pattern, preprocess(pattern))

        assert removed == [Tile(6, RED), Tile(6, RED), Tile(11, BLACK)]


class TestSplitByConnectivity:
    """Test splitting into independent components"""

    def test_empty(self):
        assert split_by_connectivity(TileMultiset()) == []

    def test_single_component(self):
        pattern = hand(red=[1, 2, 3], black=[3])
        components = split_by_connectivity(pattern)

        assert len(components) == 1
        assert components[0] == pattern

    def test_separate_runs(self):
        """Test gaps and different colours split components"""
        pattern = hand(red=[1, 2, 3, 7, 8, 9], blue=[11, 12, 13])
        components = split_by_connectivity(pattern)

        assert components == [hand(red=[1, 2, 3]), hand(red=[7, 8, 9]), hand(blue=[11, 12, 13])]

    def test_same_rank_connects_colours(self):
        pattern = hand(red=[1, 2, 3], yellow=[3, 4, 5])
        assert len(split_by_connectivity(pattern)) == 1

    def test_counts_preserved(self):
        """Test components partition the hand with multiplicity"""
        pattern = hand(red=[1, 1, 2, 3], black=[5, 5], blue=[5], yellow=[5, 10])
        components = split_by_connectivity(pattern)

        assert sum(c.total_count() for c in components) == pattern.total_count()
        assert components[0].count(1, RED) == 2
        assert components[1].count(5, BLACK) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
