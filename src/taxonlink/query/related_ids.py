"""Cross-referencing taxon identifiers through Wikidata.

Given an identifier such as ``NCBI:9606``, the resolver finds the Wikidata
entity carrying that identifier and returns the identifiers that other
taxonomic authorities assigned to the same entity (``GBIF:2436436``,
``ITIS:180092``, ...).
"""

import logging
from typing import Any, List, Optional

from taxonlink.cache_manager import cached
from taxonlink.config import config
from taxonlink.constants import (
    MANUALLY_ADDED_PROVIDER_PROPERTIES,
    WIKIDATA_ENTITY_PREFIX,
    WIKIDATA_PROP_DIRECT_PREFIX,
)
from taxonlink.exceptions import FederatedQueryError
from taxonlink.providers import (
    ProviderIdentifierMap,
    TaxonomyProvider,
    default_provider_map,
    split_external_id,
)
from taxonlink.query import sparql
from taxonlink.query.wikidata_client import WikidataClient, binding_value, get_bindings
from taxonlink.types.data_classes import Taxon
from taxonlink.utils import strip_prefix

logger = logging.getLogger(__name__)

WIKIDATA_CACHE_NAME = "wikidata"


class WikidataTaxonResolver:
    """Resolves taxon identifiers against Wikidata.

    Args:
        client: Client used to run queries
        provider_map: Provider <-> Wikidata property tables
        use_cache: Memoize related-id lookups in the durable cache
    """

    def __init__(self,
                 client: Optional[WikidataClient] = None,
                 provider_map: ProviderIdentifierMap = default_provider_map,
                 use_cache: bool = True):
        self.client = client or WikidataClient()
        self.provider_map = provider_map
        self.use_cache = use_cache
        self._cached_related_ids = cached(
            cache_name=WIKIDATA_CACHE_NAME,
            prefix="related_ids",
        )(self._query_related_ids)

    def find_taxon_id_providers(self) -> List[str]:
        """List the Wikidata properties classified as taxon identifiers.

        World Flora Online (P7715) is always included because Wikidata does
        not classify it as a taxon identifier scheme.

        Raises:
            FederatedQueryError: If the query fails
        """
        response = self.client.execute_query(sparql.taxon_id_providers_query())

        providers: List[str] = []
        for binding in get_bindings(response):
            scheme = binding_value(binding, "scheme")
            if scheme is None:
                continue
            prop = strip_prefix(WIKIDATA_ENTITY_PREFIX, scheme)
            if prop not in providers:
                providers.append(prop)

        for prop in MANUALLY_ADDED_PROVIDER_PROPERTIES:
            if prop not in providers:
                providers.append(prop)

        logger.info(f"Found {len(providers)} taxon identifier schemes")
        return providers

    def find_related_taxon_ids(self, external_id: str) -> List[Taxon]:
        """Return the taxa Wikidata links to external_id.

        The first candidate is the Wikidata entity itself; it is followed by
        one candidate per linked identifier whose scheme maps to a known
        provider. Candidates are not deduplicated.

        Unknown prefixes and failed queries both yield an empty list.
        """
        provider, local_id = split_external_id(external_id)
        if provider is None:
            logger.debug(f"No known provider for [{external_id}]")
            return []
        if provider is not TaxonomyProvider.WIKIDATA and not self.provider_map.is_mapped(provider):
            logger.debug(f"Provider {provider.name} has no Wikidata property")
            return []

        # Language and endpoint are part of the memo key
        language = config.preferred_language
        endpoint = self.client.endpoint
        try:
            if self.use_cache:
                return list(self._cached_related_ids(external_id, language, endpoint))
            return self._query_related_ids(external_id, language, endpoint)
        except FederatedQueryError as e:
            logger.warning(f"Failed to find related ids for [{external_id}]: {e}")
            return []

    def _query_related_ids(self, external_id: str, language: str,
                           endpoint: Optional[str] = None) -> List[Taxon]:
        """Run the related-ids query. endpoint only keys the memo; the client picks the target."""
        provider, local_id = split_external_id(external_id)
        if provider is TaxonomyProvider.WIKIDATA:
            where_clause = sparql.wikidata_where_clause(local_id)
        else:
            where_clause = sparql.external_where_clause(
                self.provider_map.property_for(provider), local_id
            )
        query = sparql.related_ids_query(where_clause, language)
        bindings = get_bindings(self.client.execute_query(query))

        related: List[Taxon] = []
        if bindings:
            related.append(self._anchor_taxon(bindings[0]))
        related.extend(self._linked_taxa(bindings))
        logger.debug(f"Found {len(related)} related ids for [{external_id}]")
        return related

    def _anchor_taxon(self, binding: Any) -> Taxon:
        entity = binding_value(binding, "wdTaxonId")
        external_id = None
        if entity is not None:
            wikidata_id = strip_prefix(WIKIDATA_ENTITY_PREFIX, entity)
            external_id = TaxonomyProvider.WIKIDATA.id_prefix + wikidata_id
        return _with_name_and_rank(binding, external_id)

    def _linked_taxa(self, bindings: List[Any]) -> List[Taxon]:
        linked: List[Taxon] = []
        for binding in bindings:
            scheme = binding_value(binding, "taxonScheme")
            if scheme is None:
                continue
            prop = strip_prefix(WIKIDATA_PROP_DIRECT_PREFIX, scheme)
            provider = self.provider_map.provider_for_property(prop)
            if provider is None:
                continue
            linked_id = binding_value(binding, "taxonId")
            if linked_id is None:
                continue
            linked.append(_with_name_and_rank(binding, provider.id_prefix + linked_id))
        return linked

    def create_sparql_query(self, external_id: str,
                            preferred_language: Optional[str] = None) -> Optional[str]:
        """Build the template query for an identifier.

        Returns None when the identifier's provider has no query template.
        """
        provider, local_id = split_external_id(external_id)
        if provider is None:
            return None
        if provider is not TaxonomyProvider.WIKIDATA and not self.provider_map.is_mapped(provider):
            return None

        builder = sparql.SparqlQueryBuilder.from_resource(sparql.template_for(provider))
        return builder.build(
            local_id,
            preferred_language or config.preferred_language,
            self.provider_map.property_for(provider),
        )


def _with_name_and_rank(binding: Any, external_id: Optional[str]) -> Taxon:
    name = binding_value(binding, "wdTaxonName")
    return Taxon(
        external_id=external_id,
        name=name,
        rank=binding_value(binding, "wdTaxonRankName"),
        path=name,
    )
