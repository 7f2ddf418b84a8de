"""Homonym detection.

Two taxa with the same name can still be different organisms: "Agathis" is
both a conifer genus and a wasp genus. A match between such taxa is
rejected when their higher classification disagrees.
"""

import logging
from typing import Dict, Optional, Union

from taxonlink.constants import LINEAGE_RANKS
from taxonlink.types.data_classes import Taxon, TaxonRecord
from taxonlink.utils import normalize_kingdom

logger = logging.getLogger(__name__)


def _lineage(taxon: Union[Taxon, TaxonRecord, None]) -> Dict[str, str]:
    if taxon is None:
        return {}
    if isinstance(taxon, TaxonRecord):
        taxon = taxon.as_taxon()
    lineage = taxon.lineage()
    if "kingdom" in lineage:
        lineage["kingdom"] = normalize_kingdom(lineage["kingdom"])
    return lineage


def higher_order_mismatch(lineage_a: Dict[str, str],
                          lineage_b: Dict[str, str]) -> Optional[str]:
    """Return the first rank at which both lineages name different taxa."""
    for rank in LINEAGE_RANKS:
        name_a = lineage_a.get(rank)
        name_b = lineage_b.get(rank)
        if name_a and name_b and name_a.strip().lower() != name_b.strip().lower():
            return rank
    return None


def likely_homonym(candidate: Union[Taxon, TaxonRecord, None],
                   target: Union[Taxon, TaxonRecord, None]) -> bool:
    """Whether candidate and target are probably different taxa sharing a name.

    Only ranks present in both lineages are compared; taxa without a
    classification are never reported as homonyms.
    """
    rank = higher_order_mismatch(_lineage(candidate), _lineage(target))
    if rank is None:
        return False
    logger.debug(
        f"Likely homonym at {rank}: "
        f"{getattr(candidate, 'name', None)} vs {getattr(target, 'name', None)}"
    )
    return True
