"""Input discovery, content loading and the batch runner."""
