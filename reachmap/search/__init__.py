"""Frontier search engine and its topology strategies."""

from .engine import (
    FOOTPRINT_MARGIN,
    ExpansionStrategy,
    SearchContext,
    SearchOutcome,
    run_search,
    seed_footprint,
    should_replace,
)
from .strategies import (
    DIAGONAL_FACTOR,
    GridlessStrategy,
    HexStrategy,
    LosOrigin,
    SquareStrategy,
    strategy_for,
)

__all__ = [
    "FOOTPRINT_MARGIN",
    "ExpansionStrategy",
    "SearchContext",
    "SearchOutcome",
    "run_search",
    "seed_footprint",
    "should_replace",
    "DIAGONAL_FACTOR",
    "GridlessStrategy",
    "HexStrategy",
    "LosOrigin",
    "SquareStrategy",
    "strategy_for",
]
