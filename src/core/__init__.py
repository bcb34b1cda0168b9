"""Error taxonomy."""
