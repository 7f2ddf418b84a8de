"""Resource retrieval for taxonlink.

Reference tables are addressed by locators: plain filesystem paths,
``file://`` URIs or ``http(s)://`` URLs. A resource service turns a locator
into a readable byte stream.
"""

import io
import logging
from pathlib import Path
from typing import BinaryIO, Optional, Protocol
from urllib.parse import unquote, urlparse

import requests

from taxonlink.config import config
from taxonlink.exceptions import ResourceRetrievalError

logger = logging.getLogger(__name__)


class ResourceService(Protocol):
    """Anything that can open a resource locator as a byte stream."""

    def retrieve(self, locator: str) -> BinaryIO:
        ...


class LocalResourceService:
    """Retrieves resources from the local filesystem or over HTTP(S).

    Args:
        base_dir: Directory relative paths are resolved against
        session: Optional requests session used for remote resources
    """

    def __init__(self, base_dir: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.base_dir = Path(base_dir) if base_dir else None
        self._session = session

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": config.user_agent})
        return self._session

    def retrieve(self, locator: str) -> BinaryIO:
        """Open the resource at locator.

        Raises:
            ResourceRetrievalError: If the resource cannot be read
        """
        parsed = urlparse(locator)
        if parsed.scheme in ("http", "https"):
            return self._retrieve_remote(locator)
        if parsed.scheme == "file":
            return self._retrieve_file(Path(unquote(parsed.path)))
        return self._retrieve_file(self._resolve_path(locator))

    def _resolve_path(self, locator: str) -> Path:
        path = Path(locator)
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        return path

    def _retrieve_file(self, path: Path) -> BinaryIO:
        logger.debug(f"Opening local resource {path}")
        try:
            return open(path, "rb")
        except OSError as e:
            raise ResourceRetrievalError(f"failed to open [{path}]: {e}") from e

    def _retrieve_remote(self, url: str) -> BinaryIO:
        logger.debug(f"Downloading remote resource {url}")
        try:
            response = self.session.get(
                url,
                timeout=(config.connect_timeout, config.read_timeout),
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise ResourceRetrievalError(f"failed to retrieve [{url}]: {e}") from e
        return io.BytesIO(response.content)
