"""Term matcher interface and registry."""
