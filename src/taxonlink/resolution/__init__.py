"""Term matching and match filtering.

This package provides the pluggable term matchers used by the linker, a
registry to look them up by name, and the homonym filter that vetoes
implausible matches.
"""

from taxonlink.resolution.config import TermMatcherConfig
from taxonlink.resolution.homonym import likely_homonym
from taxonlink.resolution.strategy.base import TermMatcher
from taxonlink.resolution.strategy.registry import MatcherRegistry

# Importing the modes registers them
from taxonlink.resolution.strategy.modes.exact_match import ExactTermMatcher
from taxonlink.resolution.strategy.modes.wikidata_match import WikidataTermMatcher

__all__ = [
    # Core components
    "TermMatcherConfig",
    "TermMatcher",
    "MatcherRegistry",
    "likely_homonym",

    # Matchers
    "ExactTermMatcher",
    "WikidataTermMatcher",
]
