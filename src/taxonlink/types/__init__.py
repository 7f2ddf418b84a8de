"""Type definitions for taxonlink."""
