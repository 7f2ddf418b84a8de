"""taxonlink: taxon identity resolution and cross-reference linking.

taxonlink matches the taxon names stored in an interaction graph against
locally cached reference tables and against Wikidata, and links each taxon
to the identifiers issued for it by other taxonomic authorities.
"""

__version__ = "0.1.0"

from taxonlink.types.data_classes import (
    NameType,
    Taxon,
    TaxonRecord,
    Term,
    TermRequest,
    MatchResult,
)

__all__ = [
    "NameType",
    "Taxon",
    "TaxonRecord",
    "Term",
    "TermRequest",
    "MatchResult",
]
