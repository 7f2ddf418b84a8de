"""Exceptions raised by taxonlink."""


class TaxonLinkError(Exception):
    """Base class for all taxonlink errors."""


class ResourceRetrievalError(TaxonLinkError):
    """A resource locator could not be opened or read."""


class TermLookupServiceError(TaxonLinkError):
    """A term mapping table could not be built."""


class MatchError(TaxonLinkError):
    """A term matcher failed to process a batch of requests."""


class FederatedQueryError(TaxonLinkError):
    """A query against the federated knowledge base failed."""
