"""Settings and declarative stage configuration."""
