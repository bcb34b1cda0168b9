"""Provider adapters (SDKs imported lazily)."""
