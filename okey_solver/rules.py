"""
Solver Rule Sets

Tunable settings for the hand solvers:
- cache capacity
- joker placement thresholds
- search breadth
"""

from dataclasses import dataclass


@dataclass
class SolverRules:
    """
    Configuration shared by the pattern solvers.

    The defaults give full-strength search with the standard joker thresholds.
    """

    name: str = "Default"

    # Maximum number of cached sub-hand solutions
    cache_size: int = 1000

    # Joker placement gate: a candidate may not leave a neighbouring
    # tile with connectivity below this value
    single_joker_min_connectivity: int = 3
    double_joker_together_min_connectivity: int = 3
    double_joker_separate_min_connectivity: int = 2

    # Also try three-colour triplets at four-colour ranks
    split_tetrads: bool = True

    # Jokers may stay in hand when placing them does not help
    allow_unused_joker: bool = True

    def fingerprint(self) -> str:
        """
        Short tag of the settings that change solver results.

        Solvers sharing a cache prefix their keys with it, so solvers
        with different settings never read each other's entries.
        """
        return (
            f"j{self.single_joker_min_connectivity}"
            f".{self.double_joker_together_min_connectivity}"
            f".{self.double_joker_separate_min_connectivity}"
            f"t{int(self.split_tetrads)}u{int(self.allow_unused_joker)}"
        )

    def __repr__(self) -> str:
        return f"SolverRules({self.name})"


DEFAULT_RULES = SolverRules(name="Default")


# Smaller cache and narrower search, for quick estimates
FAST_RULES = SolverRules(
    name="Fast",
    cache_size=200,
    single_joker_min_connectivity=3,
    double_joker_together_min_connectivity=3,
    double_joker_separate_min_connectivity=3,
    split_tetrads=False,
    allow_unused_joker=True,
)
