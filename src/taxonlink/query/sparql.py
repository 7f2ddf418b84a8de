"""SPARQL query construction for Wikidata.

Two kinds of queries are built here:

- hand-built queries for enumerating taxon identifier schemes and for
  collecting the identifiers linked to one taxon, and
- template-based queries, where a text template with the literal
  placeholders ``{{ID}}``, ``{{LANG}}`` and ``{{SCHEME}}`` is filled in.

Placeholder substitution is literal; values are inserted as given, without
escaping. Callers must make sure identifiers and language codes cannot
break out of the template.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional

from taxonlink.constants import TAXON_ID_SCHEME_CLASS
from taxonlink.providers import TaxonomyProvider

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

WIKIDATA_TEMPLATE = "wikidata.sparql.template"
PLAZI_TEMPLATE = "plazi.sparql.template"
TAXON_TEMPLATE = "taxon.sparql.template"

ID_PLACEHOLDER = "{{ID}}"
LANG_PLACEHOLDER = "{{LANG}}"
SCHEME_PLACEHOLDER = "{{SCHEME}}"


@lru_cache(maxsize=None)
def load_template(template_name: str) -> str:
    """Read a query template shipped with taxonlink.

    Raises:
        FileNotFoundError: If no such template exists
    """
    path = TEMPLATE_DIR / template_name
    with open(path, encoding="utf-8") as f:
        return f.read()


class SparqlQueryBuilder:
    """Fills in a query template.

    Args:
        template: The template text
        name: Name used in log messages
    """

    def __init__(self, template: str, name: str = "<inline>"):
        self.template = template
        self.name = name

    @classmethod
    def from_resource(cls, template_name: str) -> "SparqlQueryBuilder":
        return cls(load_template(template_name), name=template_name)

    def substitutions(self, taxon_id: str, language: str,
                      scheme: Optional[str]) -> Dict[str, str]:
        return {
            ID_PLACEHOLDER: taxon_id,
            LANG_PLACEHOLDER: language,
            SCHEME_PLACEHOLDER: scheme or "",
        }

    def build(self, taxon_id: str, language: str, scheme: Optional[str] = None) -> str:
        """Return the template with every placeholder replaced."""
        query = self.template
        for placeholder, value in self.substitutions(taxon_id, language, scheme).items():
            query = query.replace(placeholder, value)
        logger.debug(f"Built query from {self.name} for id {taxon_id}")
        return query


def template_for(provider: TaxonomyProvider) -> str:
    """Pick the template for a provider that has a Wikidata property."""
    if provider is TaxonomyProvider.WIKIDATA:
        return WIKIDATA_TEMPLATE
    if provider is TaxonomyProvider.PLAZI:
        return PLAZI_TEMPLATE
    return TAXON_TEMPLATE


def taxon_id_providers_query() -> str:
    """Query listing every Wikidata property that is a taxon identifier."""
    return (
        "SELECT ?scheme WHERE { "
        f"?scheme wdt:P31 wd:{TAXON_ID_SCHEME_CLASS} . "
        "} "
    )


def wikidata_where_clause(taxon_id: str) -> str:
    """Where clause anchored on a Wikidata entity id such as Q140."""
    return (
        f"bind ( wd:{taxon_id} as ?wdTaxonId )\n"
        f"wd:{taxon_id} ?taxonScheme ?taxonId .\n"
    )


def external_where_clause(wikidata_property: str, taxon_id: str) -> str:
    """Where clause matching entities whose property equals taxon_id."""
    return (
        f"?wdTaxonId wdt:{wikidata_property} \"{taxon_id}\" .\n"
        "?wdTaxonId ?taxonScheme ?taxonId .\n"
    )


def related_ids_query(where_clause: str, language: str = "en") -> str:
    """Query collecting all taxon identifiers of the matched entity."""
    return (
        "SELECT ?wdTaxonId ?taxonScheme ?taxonId ?wdTaxonName ?wdTaxonRankName WHERE {\n"
        + where_clause
        + "  ?taxonSchemeEntity wikibase:directClaim ?taxonScheme .\n"
        f"  ?taxonSchemeEntity wdt:P31 wd:{TAXON_ID_SCHEME_CLASS} .\n"
        "  OPTIONAL { ?wdTaxonId wdt:P225 ?wdTaxonName . }\n"
        "  OPTIONAL { ?wdTaxonId wdt:P105 ?wdTaxonRank .\n"
        "             ?wdTaxonRank rdfs:label ?wdTaxonRankName .\n"
        f"             FILTER(LANG(?wdTaxonRankName) = \"{language}\") }}\n"
        "}"
    )
