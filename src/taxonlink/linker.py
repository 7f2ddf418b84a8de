"""Batch linking of catalog taxa to matched taxa.

The linker scans every taxon in the graph, collects them into batches of a
fixed size, sends each batch to a term matcher and connects each taxon to the
candidates the matcher returns. Matches with no relation, and matches the
homonym filter rejects, are dropped.

A failing batch is logged and skipped; the run continues with the next batch.
There is no checkpoint: a new run starts over from the first taxon.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from tqdm import tqdm

from taxonlink.config import config
from taxonlink.exceptions import MatchError
from taxonlink.graph import GraphStore
from taxonlink.resolution.homonym import likely_homonym
from taxonlink.resolution.strategy.base import TermMatcher
from taxonlink.types.data_classes import (
    MatchResult,
    NameType,
    NodeId,
    Taxon,
    TaxonRecord,
    TermRequest,
)

logger = logging.getLogger(__name__)

HomonymFilter = Callable[[Taxon, TaxonRecord], bool]


@dataclass
class LinkStats:
    """Counters for one linker run."""

    records: int = 0
    batches: int = 0
    failed_batches: int = 0
    results: int = 0
    edges: int = 0
    no_relation: int = 0
    homonyms: int = 0
    unknown_source: int = 0
    elapsed_ms: float = 0.0


class TaxonLinker:
    """Links all taxa of a graph using a term matcher.

    Args:
        matcher: Matcher used for every batch
        graph: Graph store to read taxa from and write edges to
        batch_size: Number of taxa per batch (defaults to config.batch_size)
        homonym_filter: Returns True to veto a (candidate, taxon) pair
        show_progress: Whether to show a progress bar
    """

    def __init__(self,
                 matcher: TermMatcher,
                 graph: GraphStore,
                 batch_size: Optional[int] = None,
                 homonym_filter: HomonymFilter = likely_homonym,
                 show_progress: Optional[bool] = None):
        self.matcher = matcher
        self.graph = graph
        self.batch_size = config.batch_size if batch_size is None else batch_size
        if self.batch_size < 1:
            raise ValueError(f"batch size must be positive, got {self.batch_size}")
        self.homonym_filter = homonym_filter
        self.show_progress = config.show_progress if show_progress is None else show_progress

    def link(self) -> LinkStats:
        """Run the linker over the whole catalog."""
        stats = LinkStats()
        node_map: Dict[NodeId, TaxonRecord] = {}
        start = time.time()

        taxa = tqdm(self.graph.iter_taxa(), desc="Linking taxa", unit="taxon",
                    disable=not self.show_progress)
        for record in taxa:
            node_map[record.node_id] = record
            stats.records += 1
            if len(node_map) % self.batch_size == 0:
                self._handle_batch(node_map, stats)

        # Remaining partial batch
        self._handle_batch(node_map, stats)

        stats.elapsed_ms = (time.time() - start) * 1000
        logger.info(
            f"Linked {stats.records} taxa in {stats.batches} batches: "
            f"{stats.edges} edges, {stats.failed_batches} failed batches, "
            f"{stats.homonyms} homonyms rejected"
        )
        return stats

    def _handle_batch(self, node_map: Dict[NodeId, TaxonRecord], stats: LinkStats) -> None:
        if not node_map:
            return

        stats.batches += 1
        msg_prefix = f"batch #{stats.batches}"
        batch_start = time.time()
        logger.info(f"{msg_prefix} preparing...")

        requests = [
            TermRequest(node_id=node_id, name=record.name, id=record.external_id)
            for node_id, record in node_map.items()
        ]

        accepted: List[Tuple[TaxonRecord, MatchResult]] = []
        try:
            for result in self.matcher.match(requests):
                stats.results += 1
                record = self._accept(result, node_map, stats)
                if record is not None:
                    accepted.append((record, result))
        except MatchError as e:
            stats.failed_batches += 1
            logger.error(f"{msg_prefix} problem matching terms: {e}")
            accepted = []

        for record, result in accepted:
            self.graph.connect_taxa(record, result.candidate, result.relation_type)
        stats.edges += self.graph.flush()

        elapsed_ms = (time.time() - batch_start) * 1000
        logger.info(
            f"{msg_prefix} completed in [{elapsed_ms:.0f}] ms "
            f"({elapsed_ms / len(requests):.2f} ms/name)"
        )
        node_map.clear()

    def _accept(self, result: MatchResult, node_map: Dict[NodeId, TaxonRecord],
                stats: LinkStats) -> Optional[TaxonRecord]:
        """Return the source taxon if the result should become an edge."""
        record = node_map.get(result.source_node_id)
        if record is None:
            stats.unknown_source += 1
            return None
        if result.relation_type is NameType.NONE:
            stats.no_relation += 1
            return None
        if self.homonym_filter(result.candidate, record):
            stats.homonyms += 1
            return None
        return record
