"""Configuration for term matchers.

This module provides a centralized configuration class for controlling the
behavior of term matchers.
"""

from typing import Any, Dict

from taxonlink.types.data_classes import NameType


class TermMatcherConfig:
    """Configuration for term matchers.

    This class centralizes parameters that affect how matchers label
    their results, so matching behavior can be adjusted without code changes.
    """

    def __init__(self):
        # Relation assigned to a name found in a reference table
        self.table_match_relation = NameType.SAME_AS
        # Relation assigned to identifiers linked through Wikidata
        self.linked_id_relation = NameType.SAME_AS
        # Report requests without a match as NONE results instead of dropping them
        self.report_unmatched = True

    def update(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration from a dictionary.

        Args:
            config_dict: Dictionary of configuration parameters to update
        """
        for key, value in config_dict.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration parameter: {key}")
