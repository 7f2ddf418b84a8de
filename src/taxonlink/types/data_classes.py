"""Core data classes for taxonlink.

This module defines the immutable records passed between the lookup
services, the matchers, the homonym filter and the linker.

Design Principles:
- Immutability: records are frozen once created
- Reference-based Relationships: catalog records are referred to by node id
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

from taxonlink.constants import NO_MATCH

# Graph-assigned node identifier: an element id string in Neo4j, any hashable
# key in memory
NodeId = Union[str, int]


class NameType(Enum):
    """Relation between a catalog taxon and a matched candidate taxon."""

    SAME_AS = "SAME_AS"
    SYNONYM_OF = "SYNONYM_OF"
    HOMONYM_OF = "HOMONYM_OF"
    COMMON_NAME_OF = "COMMON_NAME_OF"
    SIMILAR_TO = "SIMILAR_TO"
    NONE = "NONE"

    @property
    def relationship_type(self) -> Optional[str]:
        """Graph relationship type for this relation, None for NONE."""
        if self is NameType.NONE:
            return None
        return self.value


@dataclass(frozen=True)
class Term:
    """An identifier and name pair."""

    id: str
    name: Optional[str] = None

    @property
    def is_no_match(self) -> bool:
        return self.id == NO_MATCH

    @classmethod
    def no_match(cls, name: Optional[str]) -> "Term":
        """Create the sentinel term for a name that did not resolve."""
        return cls(id=NO_MATCH, name=name)


@dataclass(frozen=True)
class Taxon:
    """A taxon as known by some taxonomic authority."""

    external_id: Optional[str] = None
    name: Optional[str] = None
    rank: Optional[str] = None

    # Pipe-separated lineage, highest rank first, e.g. "Animalia | Chordata"
    path: Optional[str] = None
    path_names: Optional[str] = None
    path_ids: Optional[str] = None

    def lineage(self) -> Dict[str, str]:
        """Return a rank -> name mapping built from path and path_names."""
        if not self.path or not self.path_names:
            return {}
        names = [part.strip() for part in self.path.split("|")]
        ranks = [part.strip().lower() for part in self.path_names.split("|")]
        return {
            rank: name
            for rank, name in zip(ranks, names)
            if rank and name
        }


@dataclass(frozen=True)
class TaxonRecord:
    """A taxon node read from the graph catalog."""

    # Internal graph identifier of the node; unique within the catalog
    node_id: NodeId
    name: Optional[str] = None
    external_id: Optional[str] = None
    rank: Optional[str] = None
    path: Optional[str] = None
    path_names: Optional[str] = None

    def as_taxon(self) -> Taxon:
        return Taxon(
            external_id=self.external_id,
            name=self.name,
            rank=self.rank,
            path=self.path,
            path_names=self.path_names,
        )


@dataclass(frozen=True)
class TermRequest:
    """A single name submitted to a term matcher."""

    # Graph node the request was built for; results are routed back by it
    node_id: NodeId
    name: Optional[str] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class MatchResult:
    """A candidate taxon produced by a term matcher for one request."""

    source_node_id: NodeId
    source_name: Optional[str]
    relation_type: NameType
    candidate: Taxon
    metadata: Dict[str, str] = field(default_factory=dict)
