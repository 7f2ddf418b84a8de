from unittest.mock import MagicMock

import pytest
import requests

from taxonlink.exceptions import ResourceRetrievalError
from taxonlink.resources import LocalResourceService


def test_retrieve_relative_path(tmp_path):
    (tmp_path / "names.csv").write_bytes(b"1,a,b,c\n")
    service = LocalResourceService(base_dir=str(tmp_path))
    with service.retrieve("names.csv") as stream:
        assert stream.read() == b"1,a,b,c\n"


def test_retrieve_missing_file(tmp_path):
    with pytest.raises(ResourceRetrievalError):
        LocalResourceService().retrieve(str(tmp_path / "missing.csv"))


def test_retrieve_remote():
    session = MagicMock(spec=requests.Session)
    session.get.return_value.content = b"1,a,b,c\n"
    service = LocalResourceService(session=session)

    assert service.retrieve("https://example.org/names.csv").read() == b"1,a,b,c\n"
    url = session.get.call_args.args[0]
    assert url == "https://example.org/names.csv"


def test_retrieve_remote_failure():
    session = MagicMock(spec=requests.Session)
    session.get.side_effect = requests.ConnectionError("unreachable")
    with pytest.raises(ResourceRetrievalError):
        LocalResourceService(session=session).retrieve("http://example.org/names.csv")
