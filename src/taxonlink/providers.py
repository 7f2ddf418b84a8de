"""Taxonomic authorities and their Wikidata identifier properties.

Every external taxon identifier used in taxonlink has the form
``PREFIX:localId`` where the prefix names the authority that issued it.
This module knows those prefixes and relates each authority to the Wikidata
property that stores its identifiers.
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)


class TaxonomyProvider(Enum):
    """A taxonomic authority, valued by its identifier prefix."""

    OPEN_TREE_OF_LIFE = "OTT:"
    BOLD_TAXON = "BOLDTaxon:"
    INDEX_FUNGORUM = "IF:"
    ITIS = "ITIS:"
    NCBI = "NCBI:"
    EOL = "EOL:"
    EOL_V2 = "EOL_V2:"
    WORMS = "WORMS:"
    INTERIM_REGISTER_OF_MARINE_AND_NONMARINE_GENERA = "IRMNG:"
    FISHBASE_SPECCODE = "FBC:FB:SpecCode:"
    SEALIFEBASE_SPECCODE = "FBC:SLB:SpecCode:"
    GBIF = "GBIF:"
    INATURALIST_TAXON = "INAT_TAXON:"
    NBN = "NBN:"
    MSW = "MSW:"
    PLAZI = "PLAZI:"
    CATALOGUE_OF_LIFE = "COL:"
    WORLD_OF_FLORA_ONLINE = "WFO:"
    WIKIDATA = "WD:"

    @property
    def id_prefix(self) -> str:
        return self.value


# Longest prefixes first so that "FBC:SLB:SpecCode:" is not shadowed
_PREFIXES_BY_LENGTH = sorted(TaxonomyProvider, key=lambda p: len(p.value), reverse=True)


def provider_for(external_id: Optional[str]) -> Optional[TaxonomyProvider]:
    """Return the provider whose prefix starts external_id, or None.

    Prefixes are matched exactly and case-sensitively.
    """
    if not external_id:
        return None
    for provider in _PREFIXES_BY_LENGTH:
        if external_id.startswith(provider.id_prefix):
            return provider
    return None


def split_external_id(external_id: Optional[str]) -> Tuple[Optional[TaxonomyProvider], Optional[str]]:
    """Split ``PREFIX:localId`` into its provider and local id.

    Returns (None, None) when the prefix is not a known provider.
    """
    provider = provider_for(external_id)
    if provider is None:
        return None, None
    return provider, external_id[len(provider.id_prefix):]


DEFAULT_PROVIDER_TO_WIKIDATA: Dict[TaxonomyProvider, str] = {
    TaxonomyProvider.OPEN_TREE_OF_LIFE: "P9157",
    TaxonomyProvider.BOLD_TAXON: "P3606",
    TaxonomyProvider.INDEX_FUNGORUM: "P1391",
    TaxonomyProvider.ITIS: "P815",
    TaxonomyProvider.NCBI: "P685",
    TaxonomyProvider.EOL: "P830",
    # Both EOL identifier generations live in the same Wikidata property
    TaxonomyProvider.EOL_V2: "P830",
    TaxonomyProvider.WORMS: "P850",
    TaxonomyProvider.INTERIM_REGISTER_OF_MARINE_AND_NONMARINE_GENERA: "P5055",
    TaxonomyProvider.FISHBASE_SPECCODE: "P938",
    TaxonomyProvider.SEALIFEBASE_SPECCODE: "P6018",
    TaxonomyProvider.GBIF: "P846",
    TaxonomyProvider.INATURALIST_TAXON: "P3151",
    TaxonomyProvider.NBN: "P3240",
    TaxonomyProvider.MSW: "P959",
    TaxonomyProvider.PLAZI: "P1992",
    TaxonomyProvider.CATALOGUE_OF_LIFE: "P10585",
    TaxonomyProvider.WORLD_OF_FLORA_ONLINE: "P7715",
}

# Preferred provider for properties shared by more than one provider
_REVERSE_PREFERENCES: Dict[str, TaxonomyProvider] = {
    "P830": TaxonomyProvider.EOL,
}


class ProviderIdentifierMap:
    """Immutable, bidirectional provider <-> Wikidata property tables.

    Build one instance at startup and hand it to every consumer. Two
    providers may share a property (EOL and EOL_V2 both use P830); the
    reverse table then resolves the property to a single preferred provider.
    """

    def __init__(
        self,
        provider_to_property: Optional[Mapping[TaxonomyProvider, str]] = None,
        reverse_preferences: Optional[Mapping[str, TaxonomyProvider]] = None,
    ):
        forward = dict(provider_to_property or DEFAULT_PROVIDER_TO_WIKIDATA)
        preferences = dict(
            _REVERSE_PREFERENCES if reverse_preferences is None else reverse_preferences
        )

        reverse: Dict[str, TaxonomyProvider] = {}
        for provider, prop in forward.items():
            if prop in reverse and reverse[prop] is not provider:
                preferred = preferences.get(prop)
                if preferred is None:
                    raise ValueError(
                        f"Property {prop} is shared by {reverse[prop].name} and "
                        f"{provider.name} without a preferred provider"
                    )
                reverse[prop] = preferred
                continue
            reverse[prop] = preferences.get(prop, provider)

        self._forward = MappingProxyType(forward)
        self._reverse = MappingProxyType(reverse)
        logger.debug(
            f"Provider map covers {len(self._forward)} providers "
            f"and {len(self._reverse)} properties"
        )

    @property
    def provider_to_property(self) -> Mapping[TaxonomyProvider, str]:
        return self._forward

    @property
    def property_to_provider(self) -> Mapping[str, TaxonomyProvider]:
        return self._reverse

    def property_for(self, provider: Optional[TaxonomyProvider]) -> Optional[str]:
        if provider is None:
            return None
        return self._forward.get(provider)

    def provider_for_property(self, prop: Optional[str]) -> Optional[TaxonomyProvider]:
        if prop is None:
            return None
        return self._reverse.get(prop)

    def is_mapped(self, provider: Optional[TaxonomyProvider]) -> bool:
        return provider in self._forward

    def shared_properties(self) -> Dict[str, Tuple[TaxonomyProvider, ...]]:
        """Return properties claimed by more than one provider."""
        claims: Dict[str, list] = {}
        for provider, prop in self._forward.items():
            claims.setdefault(prop, []).append(provider)
        return {prop: tuple(providers) for prop, providers in claims.items() if len(providers) > 1}


default_provider_map = ProviderIdentifierMap()
