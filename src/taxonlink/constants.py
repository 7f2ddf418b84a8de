"""Constants shared across taxonlink."""

# Sentinel identifier for a name that could not be resolved
NO_MATCH = "no:match"

WIKIDATA_ENTITY_PREFIX = "http://www.wikidata.org/entity/"
WIKIDATA_PROP_DIRECT_PREFIX = "http://www.wikidata.org/prop/direct/"

# Wikidata class of all "taxon identifier" properties
TAXON_ID_SCHEME_CLASS = "Q42396390"

# World Flora Online is not classified as a taxon identifier scheme upstream,
# so it never shows up in the scheme enumeration query.
MANUALLY_ADDED_PROVIDER_PROPERTIES = ("P7715",)

# Linnaean ranks compared when checking lineages, highest first
LINEAGE_RANKS = ["kingdom", "phylum", "class", "order", "family"]

DEFAULT_BATCH_SIZE = 100
