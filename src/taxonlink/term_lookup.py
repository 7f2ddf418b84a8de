"""Name lookups against locally cached reference tables.

A reference table is a delimited text resource whose records start with
``id, sourceName, targetId, targetName``. The lookup service reads one or more
such tables into an in-memory mapping from normalized source name to the
terms that name maps to, and answers lookups from that mapping.
"""

import csv
import io
import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from taxonlink.exceptions import ResourceRetrievalError, TermLookupServiceError
from taxonlink.resources import LocalResourceService, ResourceService
from taxonlink.types.data_classes import Term
from taxonlink.utils import normalize

logger = logging.getLogger(__name__)

MIN_COLUMNS = 4


class TermLookupService:
    """Looks up terms by name in delimited reference tables.

    The mapping is built on the first lookup and never changes afterwards.
    A name may map to several terms; all of them are returned, in the order
    they appear in the sources.

    Args:
        sources: Locators of the reference tables
        delimiter: Field delimiter used by every table, a single character
        has_header: Whether each table starts with a header record
        resource_service: Opens locators; defaults to LocalResourceService

    Raises:
        ValueError: If delimiter is not a single character
    """

    def __init__(self,
                 sources: Sequence[str],
                 delimiter: str = ",",
                 has_header: bool = False,
                 resource_service: Optional[ResourceService] = None):
        if not isinstance(delimiter, str) or len(delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {delimiter!r}")
        self.sources = list(sources)
        self.delimiter = delimiter
        self.has_header = has_header
        self.resource_service = resource_service or LocalResourceService()
        self._mapping: Optional[Mapping[str, Tuple[Term, ...]]] = None

    @property
    def is_built(self) -> bool:
        return self._mapping is not None

    def lookup_term_by_name(self, name: Optional[str]) -> List[Term]:
        """Return the terms a name maps to.

        The normalized name is tried first, then the name with surrounding
        whitespace trimmed but otherwise untouched. If neither matches, a
        single NO_MATCH term carrying the original name is returned, so the
        result is never empty.

        Raises:
            TermLookupServiceError: If the mapping cannot be built
        """
        if self._mapping is None:
            self._mapping = self.build_mapping(self.sources)

        if name is None:
            return [Term.no_match(name)]

        terms = self._mapping.get(normalize(name))
        if not terms:
            terms = self._mapping.get(name.strip())

        if not terms:
            return [Term.no_match(name)]
        return list(terms)

    def build_mapping(self, sources: Sequence[str]) -> Mapping[str, Tuple[Term, ...]]:
        """Read all sources into a read-only name -> terms mapping.

        A failure to retrieve or parse any single source fails the whole
        build; no partial mapping is kept.

        Raises:
            TermLookupServiceError: If any source cannot be retrieved or parsed
        """
        mapping: Dict[str, List[Term]] = {}
        for locator in sources:
            try:
                text = self._read_text(locator)
                added = self._parse_records(locator, text, mapping)
            except (ResourceRetrievalError, csv.Error, UnicodeDecodeError, OSError) as e:
                raise TermLookupServiceError(
                    f"failed to retrieve mapping from [{locator}]"
                ) from e
            logger.info(f"Loaded {added} term mappings from {locator}")

        logger.info(f"Built term mapping with {len(mapping)} names from {len(sources)} source(s)")
        return MappingProxyType({key: tuple(terms) for key, terms in mapping.items()})

    def _read_text(self, locator: str) -> str:
        stream = self.resource_service.retrieve(locator)
        try:
            return stream.read().decode("utf-8")
        finally:
            stream.close()

    def _parse_records(self, locator: str, text: str,
                       mapping: Dict[str, List[Term]]) -> int:
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=self.delimiter)
        if self.has_header:
            next(reader, None)

        added = 0
        for record in reader:
            if not record:
                continue
            if len(record) < MIN_COLUMNS:
                logger.warning(
                    f"line [{reader.line_num}] in [{locator}] contains less than "
                    f"{MIN_COLUMNS} columns"
                )
                continue

            source_name, target_id, target_name = record[1], record[2], record[3]
            if not (source_name.strip() and target_id.strip() and target_name.strip()):
                logger.warning(
                    f"line [{reader.line_num}] in [{locator}] has a blank name or id"
                )
                continue

            mapping.setdefault(normalize(source_name), []).append(
                Term(id=target_id, name=target_name)
            )
            added += 1
        return added

    def shutdown(self) -> None:
        """Release the mapping; the next lookup rebuilds it."""
        self._mapping = None
