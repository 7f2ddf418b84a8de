"""taxonlink command-line interface.

This module provides the argument parser and command dispatching logic for
inspecting Wikidata cross references, looking names up in reference tables
and linking a graph catalog.
"""

import argparse
import json
import logging
import sys
import time
from typing import List, Optional

from taxonlink import __version__
from taxonlink.cache_manager import clear_cache, get_cache_stats
from taxonlink.config import config
from taxonlink.exceptions import TaxonLinkError
from taxonlink.graph import Neo4jGraphStore
from taxonlink.linker import TaxonLinker
from taxonlink.logging_config import setup_logging
from taxonlink.query.related_ids import WikidataTaxonResolver
from taxonlink.resolution import MatcherRegistry
from taxonlink.term_lookup import TermLookupService

logger = logging.getLogger(__name__)


DELIMITER_ALIASES = {
    "tab": "\t",
    "\\t": "\t",
    "comma": ",",
    "pipe": "|",
}


def parse_delimiter(value: str) -> str:
    """Turn a --delimiter value into a single field delimiter character.

    Accepts a literal character, the escape `\\t`, or one of the names
    tab, comma and pipe.
    """
    delimiter = DELIMITER_ALIASES.get(value.lower(), value)
    if len(delimiter) != 1:
        raise argparse.ArgumentTypeError(
            f"delimiter must be a single character or one of {sorted(DELIMITER_ALIASES)}, got {value!r}"
        )
    return delimiter


def _add_mapping_arguments(parser: argparse.ArgumentParser, required: bool) -> None:
    parser.add_argument(
        "--mapping",
        action="append",
        required=required,
        help="Reference table locator (path, file:// or http(s):// URL); may be repeated"
    )
    parser.add_argument(
        "--delimiter",
        default=",",
        type=parse_delimiter,
        help="Field delimiter of the reference tables (a character, or tab, comma, pipe)"
    )
    parser.add_argument(
        "--header",
        action="store_true",
        help="Reference tables start with a header record"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="taxonlink: Resolve taxon names and link taxon identifiers through Wikidata.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Global options for logging, cache management and application metadata
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Set logging level"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Optional file to write logs to (in addition to console output)"
    )
    parser.add_argument(
        "--cache-dir",
        type=str,
        help="Directory holding the durable caches"
    )
    parser.add_argument(
        "--cache-stats",
        action="store_true",
        default=False,
        help="Display statistics about the cache and exit"
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        default=False,
        help="Clear the taxonlink cache. May be used in isolation."
    )
    parser.add_argument(
        "--show-config",
        action="store_true",
        help="Show current configuration and exit"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version number and exit"
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- 'providers' command ---
    subparsers.add_parser(
        "providers", help="List the Wikidata properties used as taxon identifiers"
    )

    # --- 'related' command ---
    parser_related = subparsers.add_parser(
        "related", help="List taxon ids Wikidata links to an external id"
    )
    parser_related.add_argument("external_id", help="Identifier such as NCBI:9606")
    parser_related.add_argument(
        "--no-cache", action="store_true", help="Bypass the durable cache"
    )
    parser_related.add_argument(
        "--format", choices=["text", "json"], default="text", help="Output format"
    )

    # --- 'query' command ---
    parser_query = subparsers.add_parser(
        "query", help="Print the SPARQL query built for an external id"
    )
    parser_query.add_argument("external_id", help="Identifier such as ITIS:180092")
    parser_query.add_argument(
        "--preferred-language",
        default=config.preferred_language,
        help="Language code for labels"
    )

    # --- 'lookup' command ---
    parser_lookup = subparsers.add_parser(
        "lookup", help="Look a name up in reference tables"
    )
    parser_lookup.add_argument("name", help="Name to look up")
    _add_mapping_arguments(parser_lookup, required=True)

    # --- 'link' command ---
    parser_link = subparsers.add_parser(
        "link", help="Link every taxon in the Neo4j catalog"
    )
    parser_link.add_argument(
        "--matcher",
        choices=MatcherRegistry.list_matchers(),
        default="wikidata",
        help="Term matcher to use"
    )
    _add_mapping_arguments(parser_link, required=False)
    parser_link.add_argument(
        "--batch-size",
        type=int,
        default=config.batch_size,
        help="Number of taxa per matcher batch"
    )
    parser_link.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not show a progress bar"
    )

    return parser


# -----------------------------------------------------------------------------
# Dispatch Functions for Each Command
# -----------------------------------------------------------------------------
def run_providers(args: argparse.Namespace) -> int:
    resolver = WikidataTaxonResolver()
    for prop in resolver.find_taxon_id_providers():
        print(prop)
    return 0


def run_related(args: argparse.Namespace) -> int:
    resolver = WikidataTaxonResolver(use_cache=not args.no_cache)
    related = resolver.find_related_taxon_ids(args.external_id)
    if args.format == "json":
        print(json.dumps([
            {"externalId": t.external_id, "name": t.name, "rank": t.rank}
            for t in related
        ], indent=2))
        return 0

    for taxon in related:
        print(f"{taxon.external_id}\t{taxon.name or ''}\t{taxon.rank or ''}")
    return 0


def run_query(args: argparse.Namespace) -> int:
    resolver = WikidataTaxonResolver(use_cache=False)
    query = resolver.create_sparql_query(args.external_id, args.preferred_language)
    if query is None:
        print(f"No query template for [{args.external_id}]", file=sys.stderr)
        return 1
    print(query)
    return 0


def run_lookup(args: argparse.Namespace) -> int:
    service = TermLookupService(args.mapping, delimiter=args.delimiter, has_header=args.header)
    for term in service.lookup_term_by_name(args.name):
        print(f"{term.id}\t{term.name or ''}")
    return 0


def run_link(args: argparse.Namespace) -> int:
    try:
        matcher = MatcherRegistry.create_matcher(
            args.matcher, args.mapping, delimiter=args.delimiter, has_header=args.header
        )
    except ValueError as e:
        logger.error(f"Cannot build the {args.matcher} matcher: {e}")
        return 1

    graph = Neo4jGraphStore()
    try:
        start_time = time.time()
        linker = TaxonLinker(matcher, graph, batch_size=args.batch_size,
                             show_progress=not args.no_progress)
        stats = linker.link()
        elapsed_time = time.time() - start_time
        logger.info(f"Linking completed in {elapsed_time:.2f} seconds")
        print(f"Linked {stats.records} taxa: {stats.edges} edges in {stats.batches} batches "
              f"({stats.failed_batches} failed)")
    finally:
        graph.close()
    return 0


COMMANDS = {
    "providers": run_providers,
    "related": run_related,
    "query": run_query,
    "lookup": run_lookup,
    "link": run_link,
}


# -----------------------------------------------------------------------------
# Main Entry Point
# -----------------------------------------------------------------------------
def main(args: Optional[List[str]] = None) -> int:
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    config.update_from_args(parsed_args)
    setup_logging(parsed_args.log_level, parsed_args.log_file)

    if parsed_args.show_config:
        print(json.dumps(config.get_config_summary(), indent=2))
        return 0

    if parsed_args.cache_stats:
        stats = get_cache_stats()
        print("\ntaxonlink Cache Statistics:")
        for key, value in stats.items():
            print(f"  {key}: {value}")
        return 0

    if parsed_args.clear_cache:
        count = clear_cache()
        print(f"\nCleared {count} cache entries")
        if parsed_args.command is None:
            return 0

    if parsed_args.command is None:
        parser.print_help()
        return 1

    config.ensure_directories()
    try:
        return COMMANDS[parsed_args.command](parsed_args)
    except TaxonLinkError as e:
        logger.error(f"{parsed_args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
