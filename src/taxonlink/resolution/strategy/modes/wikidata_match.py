"""Matcher backed by Wikidata cross references.

Requests whose id carries a known provider prefix are expanded into the
identifiers other authorities use for the same taxon.
"""

import logging
from typing import Iterator, List, Optional

from taxonlink.providers import provider_for
from taxonlink.query.related_ids import WikidataTaxonResolver
from taxonlink.resolution.config import TermMatcherConfig
from taxonlink.resolution.strategy.base import TermMatcher
from taxonlink.resolution.strategy.registry import MatcherRegistry
from taxonlink.types.data_classes import MatchResult, TermRequest

logger = logging.getLogger(__name__)


@MatcherRegistry.register("wikidata")
class WikidataTermMatcher(TermMatcher):
    """Links each request id to the ids Wikidata lists for the same taxon."""

    def __init__(self, resolver: Optional[WikidataTaxonResolver] = None,
                 config: Optional[TermMatcherConfig] = None):
        super().__init__(config)
        self.resolver = resolver or WikidataTaxonResolver()

    def match(self, requests: List[TermRequest]) -> Iterator[MatchResult]:
        for request in requests:
            if provider_for(request.id) is None:
                logger.debug(f"Skipping request without a provider id: {request.name}")
                if self.config.report_unmatched:
                    yield self._no_match(request)
                continue

            related = [
                taxon for taxon in self.resolver.find_related_taxon_ids(request.id)
                if taxon.external_id and taxon.external_id != request.id
            ]
            if not related:
                if self.config.report_unmatched:
                    yield self._no_match(request)
                continue

            for taxon in related:
                yield self._result(request, self.config.linked_id_relation, taxon)
