import io
from unittest.mock import MagicMock

import pytest

from taxonlink.exceptions import MatchError, ResourceRetrievalError
from taxonlink.resolution import (
    ExactTermMatcher,
    MatcherRegistry,
    TermMatcherConfig,
    WikidataTermMatcher,
)
from taxonlink.term_lookup import TermLookupService
from taxonlink.types.data_classes import NameType, Taxon, TermRequest


class InlineResources:
    def __init__(self, text):
        self.text = text

    def retrieve(self, locator):
        if self.text is None:
            raise ResourceRetrievalError(f"no such resource [{locator}]")
        return io.BytesIO(self.text.encode("utf-8"))


def lookup_service(text):
    return TermLookupService(["mem:names"], resource_service=InlineResources(text))


NAMES = (
    "1,Homo sapiens,NCBI:9606,Homo sapiens\n"
    "2,Homo sapiens,ITIS:180092,Homo sapiens\n"
)


def test_exact_matcher_yields_every_term():
    matcher = ExactTermMatcher(lookup_service(NAMES))
    results = list(matcher.match([TermRequest(node_id=1, name="Homo sapiens")]))

    assert [r.candidate.external_id for r in results] == ["NCBI:9606", "ITIS:180092"]
    assert all(r.relation_type is NameType.SAME_AS for r in results)
    assert all(r.source_node_id == 1 for r in results)
    assert results[0].metadata == {"matcher": "ExactTermMatcher"}


def test_exact_matcher_reports_unmatched_as_none():
    matcher = ExactTermMatcher(lookup_service(NAMES))
    results = list(matcher.match([TermRequest(node_id=2, name="Felis catus")]))
    assert len(results) == 1
    assert results[0].relation_type is NameType.NONE
    assert results[0].source_node_id == 2


def test_exact_matcher_can_drop_unmatched():
    config = TermMatcherConfig()
    config.update({"report_unmatched": False})
    matcher = ExactTermMatcher(lookup_service(NAMES), config)
    assert list(matcher.match([TermRequest(node_id=2, name="Felis catus")])) == []


def test_exact_matcher_relation_is_configurable():
    config = TermMatcherConfig()
    config.update({"table_match_relation": NameType.SYNONYM_OF})
    matcher = ExactTermMatcher(lookup_service(NAMES), config)
    results = list(matcher.match([TermRequest(node_id=1, name="homo sapiens")]))
    assert {r.relation_type for r in results} == {NameType.SYNONYM_OF}


def test_exact_matcher_wraps_lookup_failures():
    matcher = ExactTermMatcher(lookup_service(None))
    with pytest.raises(MatchError):
        list(matcher.match([TermRequest(node_id=1, name="Homo sapiens")]))


def test_unknown_config_key_is_rejected():
    with pytest.raises(ValueError):
        TermMatcherConfig().update({"fuzzy": True})


def test_wikidata_matcher_links_related_ids():
    resolver = MagicMock()
    resolver.find_related_taxon_ids.return_value = [
        Taxon(external_id="WD:Q15978631", name="Homo sapiens"),
        Taxon(external_id="NCBI:9606", name="Homo sapiens"),
        Taxon(external_id="GBIF:2436436", name="Homo sapiens"),
    ]
    matcher = WikidataTermMatcher(resolver)
    results = list(matcher.match([TermRequest(node_id=3, name="Homo sapiens", id="NCBI:9606")]))

    assert [r.candidate.external_id for r in results] == ["WD:Q15978631", "GBIF:2436436"]
    assert all(r.relation_type is NameType.SAME_AS for r in results)
    resolver.find_related_taxon_ids.assert_called_once_with("NCBI:9606")


def test_wikidata_matcher_skips_ids_without_provider():
    resolver = MagicMock()
    matcher = WikidataTermMatcher(resolver)
    results = list(matcher.match([
        TermRequest(node_id=4, name="Homo sapiens", id=None),
        TermRequest(node_id=5, name="Homo sapiens", id="local:42"),
    ]))
    assert [r.relation_type for r in results] == [NameType.NONE, NameType.NONE]
    resolver.find_related_taxon_ids.assert_not_called()


def test_wikidata_matcher_reports_nothing_found():
    resolver = MagicMock()
    resolver.find_related_taxon_ids.return_value = []
    matcher = WikidataTermMatcher(resolver)
    results = list(matcher.match([TermRequest(node_id=6, name="Nomen nudum", id="GBIF:1")]))
    assert [r.relation_type for r in results] == [NameType.NONE]


def test_match_with_callback():
    matcher = ExactTermMatcher(lookup_service(NAMES))
    seen = []
    matcher.match_with_callback([TermRequest(node_id=1, name="Homo sapiens")], seen.append)
    assert len(seen) == 2


def test_registry():
    assert MatcherRegistry.list_matchers() == sorted(MatcherRegistry.list_matchers())
    assert {"exact", "wikidata"} <= set(MatcherRegistry.list_matchers())
    assert MatcherRegistry.get_matcher("exact") is ExactTermMatcher
    assert ExactTermMatcher.matcher_name == "exact"
    assert WikidataTermMatcher.matcher_name == "wikidata"


def test_registry_unknown_name_lists_choices():
    with pytest.raises(ValueError, match="expected one of .*exact.*wikidata"):
        MatcherRegistry.get_matcher("fuzzy")


def test_registry_rejects_taken_name(monkeypatch):
    monkeypatch.setattr(MatcherRegistry, "_matchers", dict(MatcherRegistry._matchers))

    class OtherMatcher(ExactTermMatcher):
        pass

    with pytest.raises(ValueError, match="taken by ExactTermMatcher"):
        MatcherRegistry.register("exact")(OtherMatcher)
    # Re-registering the same class is allowed
    assert MatcherRegistry.register("exact")(ExactTermMatcher) is ExactTermMatcher
    assert MatcherRegistry.get_matcher("exact") is ExactTermMatcher


def test_create_matcher_builds_table_lookup(tmp_path):
    table = tmp_path / "names.tsv"
    table.write_text("NCBI:9606\tHomo sapiens\n")

    matcher = MatcherRegistry.create_matcher("exact", [str(table)], delimiter="\t")

    assert isinstance(matcher, ExactTermMatcher)
    assert isinstance(matcher.lookup_service, TermLookupService)
    assert MatcherRegistry.create_matcher("wikidata").__class__ is WikidataTermMatcher


def test_create_table_matcher_needs_mappings():
    with pytest.raises(ValueError, match="at least one reference table"):
        MatcherRegistry.create_matcher("exact")
