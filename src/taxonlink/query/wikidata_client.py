"""HTTP client for the Wikidata SPARQL endpoint.

The client fails fast: every request has connect and read timeouts and
nothing is retried. A failed call surfaces as FederatedQueryError right away.
"""

import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter

from taxonlink.config import config
from taxonlink.exceptions import FederatedQueryError

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON = "application/sparql-results+json"


def create_fail_fast_session(user_agent: Optional[str] = None) -> requests.Session:
    """Build a requests session that never retries."""
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=0)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({
        "Accept": SPARQL_RESULTS_JSON,
        "User-Agent": user_agent or config.user_agent,
    })
    return session


class WikidataClient:
    """Runs SPARQL queries against a Wikidata query service.

    Args:
        endpoint: SPARQL endpoint URL (defaults to config.sparql_endpoint)
        connect_timeout: Seconds to wait for a connection
        read_timeout: Seconds to wait for the response
        session: Optional pre-built session, mainly for tests
    """

    def __init__(self,
                 endpoint: Optional[str] = None,
                 connect_timeout: Optional[float] = None,
                 read_timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.endpoint = endpoint or config.sparql_endpoint
        self.connect_timeout = connect_timeout if connect_timeout is not None else config.connect_timeout
        self.read_timeout = read_timeout if read_timeout is not None else config.read_timeout
        self.session = session or create_fail_fast_session()

    def execute_query(self, sparql: str) -> Dict[str, Any]:
        """Send a query and return the decoded JSON response.

        The query is URL-encoded into the ``query`` parameter of a GET request.

        Raises:
            FederatedQueryError: On transport errors, HTTP errors or invalid JSON
        """
        logger.debug(f"SPARQL query to {self.endpoint}:\n{sparql}")
        try:
            response = self.session.get(
                self.endpoint,
                params={"query": sparql},
                timeout=(self.connect_timeout, self.read_timeout),
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise FederatedQueryError(f"query to [{self.endpoint}] failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise FederatedQueryError(
                f"query to [{self.endpoint}] returned invalid JSON"
            ) from e

    def close(self) -> None:
        self.session.close()


def get_bindings(response: Any) -> list:
    """Return ``results.bindings`` from a SPARQL JSON response, or []."""
    if not isinstance(response, dict):
        return []
    results = response.get("results")
    if not isinstance(results, dict):
        return []
    bindings = results.get("bindings")
    return bindings if isinstance(bindings, list) else []


def binding_value(binding: Any, name: str) -> Optional[str]:
    """Return the ``value`` of a named field in a binding, if present."""
    if not isinstance(binding, dict):
        return None
    field = binding.get(name)
    if not isinstance(field, dict):
        return None
    value = field.get("value")
    return None if value is None else str(value)
