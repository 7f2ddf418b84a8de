"""Named term matchers.

Matchers register themselves under a short name with the ``register``
decorator. The CLI offers the registered names as ``--matcher`` choices and
builds the chosen matcher from the resources it needs: reference tables for
table-backed matchers, nothing extra for Wikidata-backed ones.
"""

from typing import Callable, Dict, List, Optional, Sequence, Type

from taxonlink.resolution.config import TermMatcherConfig
from taxonlink.resolution.strategy.base import TermMatcher
from taxonlink.term_lookup import TermLookupService


class MatcherRegistry:
    """Registry of term matchers by name."""

    _matchers: Dict[str, Type[TermMatcher]] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[Type[TermMatcher]], Type[TermMatcher]]:
        """Class decorator registering a matcher under name.

        Raises:
            ValueError: If another matcher already uses the name
        """
        def decorator(matcher_class: Type[TermMatcher]) -> Type[TermMatcher]:
            existing = cls._matchers.get(name)
            if existing is not None and existing is not matcher_class:
                raise ValueError(
                    f"Matcher name '{name}' is taken by {existing.__name__}"
                )
            cls._matchers[name] = matcher_class
            matcher_class.matcher_name = name
            return matcher_class

        return decorator

    @classmethod
    def get_matcher(cls, name: str) -> Type[TermMatcher]:
        """Get a matcher class by name.

        Raises:
            ValueError: If no matcher is registered under name
        """
        try:
            return cls._matchers[name]
        except KeyError:
            raise ValueError(
                f"Unknown matcher '{name}', expected one of {cls.list_matchers()}"
            ) from None

    @classmethod
    def create_matcher(cls,
                       name: str,
                       mappings: Optional[Sequence[str]] = None,
                       delimiter: str = ",",
                       has_header: bool = False,
                       config: Optional[TermMatcherConfig] = None) -> TermMatcher:
        """Build a matcher by name.

        Matchers that declare ``needs_mappings`` get a TermLookupService over
        the given reference tables; the others are built from config alone.

        Raises:
            ValueError: If the name is unknown, or reference tables are
                required but none were given
        """
        matcher_class = cls.get_matcher(name)
        if not matcher_class.needs_mappings:
            return matcher_class(config=config)

        if not mappings:
            raise ValueError(f"Matcher '{name}' needs at least one reference table")
        lookup = TermLookupService(mappings, delimiter=delimiter, has_header=has_header)
        return matcher_class(lookup, config=config)

    @classmethod
    def list_matchers(cls) -> List[str]:
        """Registered matcher names, sorted."""
        return sorted(cls._matchers)
