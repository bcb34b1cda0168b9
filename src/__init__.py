"""codereview: multi-perspective code review pipeline over an LLM gateway."""

from codereview.version import __version__

__all__ = ["__version__"]
