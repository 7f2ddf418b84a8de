"""Queries against the Wikidata knowledge base."""
