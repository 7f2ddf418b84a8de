import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from taxonlink.cache_manager import close_all
from taxonlink.config import config

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path):
    """Point every durable cache at a per-test directory."""
    original_base = config.cache_base_dir
    original_dir = config.cache_dir
    config.cache_base_dir = str(tmp_path / "cache")
    config.cache_dir = str(tmp_path / "cache")
    try:
        yield tmp_path / "cache"
    finally:
        close_all()
        config.cache_base_dir = original_base
        config.cache_dir = original_dir


@pytest.fixture
def data_dir():
    return DATA_DIR


def load_json(name):
    with open(DATA_DIR / name, encoding="utf-8") as f:
        return json.load(f)


def json_response(payload):
    """A stand-in for a successful requests.Response carrying payload."""
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def human_response():
    return json_response(load_json("wikidata_ncbi_9606.json"))


@pytest.fixture
def schemes_response():
    return json_response(load_json("wikidata_taxon_id_schemes.json"))


@pytest.fixture
def make_response():
    return json_response
