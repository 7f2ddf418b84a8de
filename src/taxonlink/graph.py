"""Graph store access for the linker.

The linker needs two things from the graph: a full scan over all taxon
nodes, and a way to connect a taxon node to a matched candidate taxon.
Edges are buffered and written when ``flush`` is called, once per batch,
so a batch is committed as a whole.

Edge creation is idempotent in both stores: linking the same pair twice
with the same relation leaves a single edge. Matched candidates are kept
apart from the catalog: in Neo4j they carry the TaxonCandidate label, never
Taxon, so neither the running scan nor a later run picks them up as taxa to
link.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Optional, Protocol, Set, Tuple

from neo4j import GraphDatabase

from taxonlink.config import config
from taxonlink.types.data_classes import NameType, NodeId, Taxon, TaxonRecord

logger = logging.getLogger(__name__)


class GraphStore(Protocol):
    """The narrow slice of a graph database the linker relies on."""

    def iter_taxa(self) -> Iterator[TaxonRecord]:
        ...

    def connect_taxa(self, record: TaxonRecord, candidate: Taxon,
                     relation: NameType) -> None:
        ...

    def flush(self) -> int:
        ...


class InMemoryGraphStore:
    """A graph store held in memory, for tests and small catalogs."""

    def __init__(self, taxa: Optional[Iterable[TaxonRecord]] = None):
        self.taxa: List[TaxonRecord] = list(taxa or [])
        self.edges: List[Tuple[NodeId, NameType, Taxon]] = []
        self._edge_keys: Set[Tuple[NodeId, NameType, Optional[str], Optional[str]]] = set()
        self._pending: List[Tuple[NodeId, NameType, Taxon]] = []

    def iter_taxa(self) -> Iterator[TaxonRecord]:
        return iter(list(self.taxa))

    def connect_taxa(self, record: TaxonRecord, candidate: Taxon,
                     relation: NameType) -> None:
        self._pending.append((record.node_id, relation, candidate))

    def flush(self) -> int:
        written = 0
        for node_id, relation, candidate in self._pending:
            key = (node_id, relation, candidate.external_id, candidate.name)
            if key in self._edge_keys:
                continue
            self._edge_keys.add(key)
            self.edges.append((node_id, relation, candidate))
            written += 1
        self._pending = []
        return written

    def edges_from(self, node_id: NodeId) -> List[Tuple[NameType, Taxon]]:
        return [(relation, taxon) for source, relation, taxon in self.edges if source == node_id]


CATALOG_LABEL = "Taxon"
CANDIDATE_LABEL = "TaxonCandidate"

TAXA_QUERY = f"""
MATCH (t:{CATALOG_LABEL})
RETURN elementId(t) AS node_id, t.name AS name, t.externalId AS external_id,
       t.rank AS rank, t.path AS path, t.pathNames AS path_names
"""

CONNECT_QUERY = """
UNWIND $edges AS edge
MATCH (source) WHERE elementId(source) = edge.node_id
MERGE (target:{candidate_label} {{externalId: edge.external_id}})
  ON CREATE SET target.name = edge.name, target.rank = edge.rank, target.path = edge.path
MERGE (source)-[:{rel_type}]->(target)
"""


class Neo4jGraphStore:
    """Graph store backed by a Neo4j database.

    Args:
        uri: Bolt URI (defaults to config.neo4j_uri)
        user: User name (defaults to config.neo4j_user)
        password: Password (defaults to config.neo4j_password)
        driver: Optional pre-built driver, mainly for tests
    """

    def __init__(self, uri: Optional[str] = None, user: Optional[str] = None,
                 password: Optional[str] = None, driver=None):
        self.driver = driver or GraphDatabase.driver(
            uri or config.neo4j_uri,
            auth=(user or config.neo4j_user, password or config.neo4j_password),
        )
        self._pending: Dict[str, List[Dict[str, Optional[NodeId]]]] = defaultdict(list)

    def iter_taxa(self) -> Iterator[TaxonRecord]:
        with self.driver.session() as session:
            for row in session.run(TAXA_QUERY):
                yield TaxonRecord(
                    node_id=row["node_id"],
                    name=row["name"],
                    external_id=row["external_id"],
                    rank=row["rank"],
                    path=row["path"],
                    path_names=row["path_names"],
                )

    def connect_taxa(self, record: TaxonRecord, candidate: Taxon,
                     relation: NameType) -> None:
        rel_type = relation.relationship_type
        if rel_type is None:
            return
        if not candidate.external_id:
            logger.warning(f"Not linking node {record.node_id} to a candidate without id")
            return
        self._pending[rel_type].append({
            "node_id": record.node_id,
            "external_id": candidate.external_id,
            "name": candidate.name,
            "rank": candidate.rank,
            "path": candidate.path,
        })

    def flush(self) -> int:
        """Write all buffered edges in a single transaction."""
        if not self._pending:
            return 0
        pending = dict(self._pending)
        self._pending = defaultdict(list)

        def write(tx) -> int:
            count = 0
            for rel_type, edges in pending.items():
                query = CONNECT_QUERY.format(rel_type=rel_type, candidate_label=CANDIDATE_LABEL)
                tx.run(query, edges=edges)
                count += len(edges)
            return count

        with self.driver.session() as session:
            written = session.execute_write(write)
        logger.debug(f"Wrote {written} edges")
        return written

    def close(self) -> None:
        self.driver.close()
