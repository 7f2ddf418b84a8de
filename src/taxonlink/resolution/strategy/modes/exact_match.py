"""Matcher backed by local reference tables.

Each request name is looked up in a TermLookupService. Every term the name
maps to becomes a candidate; a NO_MATCH term becomes a NONE result.
"""

import logging
from typing import Iterator, List, Optional

from taxonlink.exceptions import MatchError, TermLookupServiceError
from taxonlink.resolution.config import TermMatcherConfig
from taxonlink.resolution.strategy.base import TermMatcher
from taxonlink.resolution.strategy.registry import MatcherRegistry
from taxonlink.term_lookup import TermLookupService
from taxonlink.types.data_classes import MatchResult, Taxon, TermRequest

logger = logging.getLogger(__name__)


@MatcherRegistry.register("exact")
class ExactTermMatcher(TermMatcher):
    """Matches names exactly (after normalization) against reference tables."""

    needs_mappings = True

    def __init__(self, lookup_service: TermLookupService,
                 config: Optional[TermMatcherConfig] = None):
        super().__init__(config)
        self.lookup_service = lookup_service

    def match(self, requests: List[TermRequest]) -> Iterator[MatchResult]:
        for request in requests:
            try:
                terms = self.lookup_service.lookup_term_by_name(request.name)
            except TermLookupServiceError as e:
                raise MatchError(f"failed to look up [{request.name}]") from e

            for term in terms:
                if term.is_no_match:
                    if self.config.report_unmatched:
                        yield self._no_match(request)
                    continue
                yield self._result(
                    request,
                    self.config.table_match_relation,
                    Taxon(external_id=term.id, name=term.name),
                )
