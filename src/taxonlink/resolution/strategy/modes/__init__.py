"""Concrete term matchers."""

from taxonlink.resolution.strategy.modes.exact_match import ExactTermMatcher
from taxonlink.resolution.strategy.modes.wikidata_match import WikidataTermMatcher

__all__ = [
    "ExactTermMatcher",
    "WikidataTermMatcher",
]
