"""Configuration management for taxonlink.

This module provides a centralized configuration object shared by the lookup
services, the federated resolver, the durable cache and the linker. Defaults
can be overridden through environment variables or command-line arguments.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from taxonlink import __version__
from taxonlink.constants import DEFAULT_BATCH_SIZE


def _default_cache_dir() -> str:
    return os.environ.get(
        "TAXONLINK_CACHE_DIR",
        str(Path.home() / ".cache" / "taxonlink"),
    )


class Config:
    """Process-wide settings for taxonlink."""

    def __init__(self):
        # Cache settings
        self.cache_base_dir: str = _default_cache_dir()
        self.cache_dir: str = self.cache_base_dir

        # Linker settings
        self.batch_size: int = DEFAULT_BATCH_SIZE
        self.show_progress: bool = True

        # Federated knowledge base settings
        self.sparql_endpoint: str = os.environ.get(
            "TAXONLINK_SPARQL_ENDPOINT", "https://query.wikidata.org/sparql"
        )
        self.connect_timeout: float = 5.0
        self.read_timeout: float = 30.0
        self.preferred_language: str = "en"
        self.user_agent: str = (
            f"taxonlink/{__version__} (https://www.globalbioticinteractions.org)"
        )

        # Graph store settings
        self.neo4j_uri: str = os.environ.get("NEO4J_URI", "bolt://localhost:7687")
        self.neo4j_user: str = os.environ.get("NEO4J_USER", "neo4j")
        self.neo4j_password: str = os.environ.get("NEO4J_PASSWORD", "neo4j")

    def ensure_directories(self) -> None:
        """Create the cache directories if they do not exist yet."""
        Path(self.cache_base_dir).mkdir(parents=True, exist_ok=True)
        Path(self.cache_dir).mkdir(parents=True, exist_ok=True)

    def update_from_args(self, args: Any) -> None:
        """Copy matching attributes from parsed command-line arguments.

        Args:
            args: An argparse namespace; attributes that are None are ignored
        """
        for key, value in vars(args).items():
            if value is None or not hasattr(self, key):
                continue
            setattr(self, key, value)
        if getattr(args, "cache_dir", None):
            self.cache_base_dir = args.cache_dir

    def get_config_summary(self) -> Dict[str, Optional[Any]]:
        """Return the current configuration, without secrets."""
        return {
            "cache_base_dir": self.cache_base_dir,
            "cache_dir": self.cache_dir,
            "batch_size": self.batch_size,
            "show_progress": self.show_progress,
            "sparql_endpoint": self.sparql_endpoint,
            "connect_timeout": self.connect_timeout,
            "read_timeout": self.read_timeout,
            "preferred_language": self.preferred_language,
            "neo4j_uri": self.neo4j_uri,
            "neo4j_user": self.neo4j_user,
        }


config = Config()
