import json

import pytest

from taxonlink import __version__
from taxonlink.cache_manager import init_db
from taxonlink.cli import create_parser, main, parse_delimiter
from taxonlink.config import config
from taxonlink.graph import InMemoryGraphStore
from taxonlink.types.data_classes import TaxonRecord


@pytest.fixture(autouse=True)
def restore_config(monkeypatch):
    for name in ("batch_size", "preferred_language", "show_progress"):
        monkeypatch.setattr(config, name, getattr(config, name))


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage:" in capsys.readouterr().out


def test_show_config(capsys):
    assert main(["--show-config"]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["batch_size"] == config.batch_size


def test_cache_stats_and_clear(capsys):
    init_db("wikidata").set("related_ids:abc", [])
    assert main(["--cache-stats"]) == 0
    assert "wikidata" in capsys.readouterr().out
    assert main(["--clear-cache"]) == 0
    assert "Cleared 1 cache entries" in capsys.readouterr().out


def test_query_command(capsys):
    assert main(["query", "ITIS:183803"]) == 0
    assert '?wdpage wdt:P815 "183803" .' in capsys.readouterr().out


def test_query_unknown_prefix():
    assert main(["query", "FOO:1"]) == 1


def test_lookup_command(capsys, data_dir):
    assert main(["lookup", "human", "--mapping", str(data_dir / "names.csv")]) == 0
    assert capsys.readouterr().out.splitlines() == ["NCBI:9606\tHomo sapiens"]


def test_lookup_missing_mapping(tmp_path):
    assert main(["lookup", "human", "--mapping", str(tmp_path / "missing.csv")]) == 1


def test_related_command(capsys, monkeypatch, human_response):
    payload = human_response.json()
    monkeypatch.setattr(
        "taxonlink.query.wikidata_client.WikidataClient.execute_query",
        lambda self, query: payload,
    )
    assert main(["related", "NCBI:9606", "--no-cache", "--format", "json"]) == 0
    related = json.loads(capsys.readouterr().out)
    assert related[0] == {"externalId": "WD:Q15978631", "name": "Homo sapiens", "rank": "species"}
    assert len(related) == 13


def test_providers_command(capsys, monkeypatch, schemes_response):
    payload = schemes_response.json()
    monkeypatch.setattr(
        "taxonlink.query.wikidata_client.WikidataClient.execute_query",
        lambda self, query: payload,
    )
    assert main(["providers"]) == 0
    assert capsys.readouterr().out.split() == ["P685", "P846", "P815", "P830", "P3151", "P7715"]


class ClosableGraph(InMemoryGraphStore):
    instances = []

    def __init__(self):
        super().__init__([
            TaxonRecord(node_id=1, name="Homo sapiens", external_id="local:1"),
            TaxonRecord(node_id=2, name="Felis catus", external_id="local:2"),
        ])
        self.closed = False
        ClosableGraph.instances.append(self)

    def close(self):
        self.closed = True


def test_link_command_with_exact_matcher(capsys, monkeypatch, data_dir):
    monkeypatch.setattr("taxonlink.cli.Neo4jGraphStore", ClosableGraph)
    ClosableGraph.instances = []

    code = main(["link", "--matcher", "exact", "--mapping", str(data_dir / "names.csv"),
                 "--batch-size", "1", "--no-progress"])

    assert code == 0
    graph, = ClosableGraph.instances
    assert graph.closed
    assert sorted(t.external_id for _, t in graph.edges_from(1)) == ["ITIS:180092", "NCBI:9606"]
    assert graph.edges_from(2) == []
    assert "Linked 2 taxa: 2 edges in 2 batches (0 failed)" in capsys.readouterr().out


def test_link_exact_needs_mapping():
    assert main(["link", "--matcher", "exact"]) == 1


def test_parser_defaults():
    args = create_parser().parse_args(["link"])
    assert args.matcher == "wikidata"
    assert args.batch_size == config.batch_size


@pytest.mark.parametrize("value,expected", [
    ("\\t", "\t"),
    ("tab", "\t"),
    ("TAB", "\t"),
    ("\t", "\t"),
    (";", ";"),
    ("pipe", "|"),
])
def test_parse_delimiter(value, expected):
    assert parse_delimiter(value) == expected


def test_lookup_tab_separated_table(capsys, tmp_path):
    table = tmp_path / "names.tsv"
    table.write_text("1\tPanthera leo\tITIS:183803\tPanthera leo\n")
    assert main(["lookup", "panthera leo", "--mapping", str(table), "--delimiter", "\\t"]) == 0
    assert capsys.readouterr().out.splitlines() == ["ITIS:183803\tPanthera leo"]


def test_bad_delimiter_is_a_usage_error(capsys, data_dir):
    with pytest.raises(SystemExit) as excinfo:
        main(["lookup", "human", "--mapping", str(data_dir / "names.csv"), "--delimiter", "::"])
    assert excinfo.value.code == 2
    assert "delimiter must be a single character" in capsys.readouterr().err
