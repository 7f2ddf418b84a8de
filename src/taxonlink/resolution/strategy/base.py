"""Base class for term matchers.

This module provides the abstract base class that all term matchers must
implement. A matcher takes a batch of term requests and produces a stream
of match results; the linker consumes that stream one batch at a time.
"""

from typing import Callable, Iterator, List, Optional

from taxonlink.resolution.config import TermMatcherConfig
from taxonlink.types.data_classes import MatchResult, NameType, Taxon, TermRequest


class TermMatcher:
    """Base class for term matchers.

    Concrete matchers implement ``match`` to provide a specific matching
    behavior (reference tables, remote services, ...). Results may come in
    any order.
    """

    # Name under which the matcher is registered
    matcher_name: Optional[str] = None
    # Whether the matcher is built over reference tables
    needs_mappings = False

    def __init__(self, config: Optional[TermMatcherConfig] = None):
        """Initialize the matcher with configuration.

        Args:
            config: Optional configuration for the matcher
        """
        self.config = config or TermMatcherConfig()

    def match(self, requests: List[TermRequest]) -> Iterator[MatchResult]:
        """Match a batch of requests.

        Args:
            requests: The requests to match

        Yields:
            Match results, zero or more per request

        Raises:
            MatchError: If the batch cannot be matched
        """
        raise NotImplementedError("Subclasses must implement match")

    def match_with_callback(self, requests: List[TermRequest],
                            on_result: Callable[[MatchResult], None]) -> None:
        """Match a batch of requests and hand each result to on_result."""
        for result in self.match(requests):
            on_result(result)

    def _no_match(self, request: TermRequest) -> MatchResult:
        """Create the NONE result reported for an unmatched request."""
        return MatchResult(
            source_node_id=request.node_id,
            source_name=request.name,
            relation_type=NameType.NONE,
            candidate=Taxon(external_id=request.id, name=request.name),
            metadata={"matcher": self.__class__.__name__},
        )

    def _result(self, request: TermRequest, relation: NameType,
                candidate: Taxon) -> MatchResult:
        return MatchResult(
            source_node_id=request.node_id,
            source_name=request.name,
            relation_type=relation,
            candidate=candidate,
            metadata={"matcher": self.__class__.__name__},
        )
