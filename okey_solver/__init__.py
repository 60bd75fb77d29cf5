"""
Okey Hand Solver
Best-score split of Okey 101 / Rummikub hands into sequences and triplets
"""

from .tiles import Tile, TileColor, TileMultiset, RankOutOfRangeError, CountOutOfRangeError
from .combinations import Combination, CombinationType, ScoredCombination, Solution
from .preprocess import preprocess, removed_tiles, split_by_connectivity
from .standard_form import StandardForm, CanonicalForm, canonical_id, is_isomorphic
from .cache import PatternCache, MemoryStore, JsonFileStore
from .rules import SolverRules, DEFAULT_RULES, FAST_RULES
from .solver import PatternSolver
from .joker_solver import JokerPatternSolver
from .pair_solver import PairPatternSolver
from .parser import PatternParser, PatternFormatError

__version__ = "0.1.0"
__all__ = [
    "Tile",
    "TileColor",
    "TileMultiset",
    "RankOutOfRangeError",
    "CountOutOfRangeError",
    "Combination",
    "CombinationType",
    "ScoredCombination",
    "Solution",
    "preprocess",
    "removed_tiles",
    "split_by_connectivity",
    "StandardForm",
    "CanonicalForm",
    "canonical_id",
    "is_isomorphic",
    "PatternCache",
    "MemoryStore",
    "JsonFileStore",
    "SolverRules",
    "DEFAULT_RULES",
    "FAST_RULES",
    "PatternSolver",
    "JokerPatternSolver",
    "PairPatternSolver",
    "PatternParser",
    "PatternFormatError",
]
